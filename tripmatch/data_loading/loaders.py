"""
Data loading functions for the matching pipeline.

This module handles loading the candidate pool (users and trips) from JSON or
YAML files and flattening pipeline inputs/outputs into pandas DataFrames for
reporting. No scoring is done here - that's handled by the fusion module.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any, Sequence

import pandas as pd
import yaml

from ..schema.entities import User, Trip
from ..schema.results import Match

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


def _load_records(filepath: str, kind: str) -> List[Dict[str, Any]]:
    """
    Read a list of records from a JSON or YAML file (chosen by extension).

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty or does not hold a list of objects
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"{kind.capitalize()} data file not found: {filepath}")

    logger.info(f"Loading {kind} from {filepath}")
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            records = yaml.safe_load(f)
        else:
            text = f.read()
            records = json.loads(text) if text.strip() else None

    if not records:
        raise ValueError(f"{kind.capitalize()} data file is empty: {filepath}")
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise ValueError(f"{kind.capitalize()} data file must contain a list of objects: {filepath}")
    return records


def load_users(filepath: str) -> List[User]:
    """
    Load users from a JSON/YAML file.

    Each record uses the User field names (snake_case); nested `profile` and
    `stats` objects are converted by the User constructor and unknown keys
    are ignored.

    Args:
        filepath: Path to the users file

    Returns:
        List of User objects, in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty, malformed, or a record is invalid
    """
    records = _load_records(filepath, "users")
    users = [User.from_dict(record) for record in records]

    duplicates = _duplicate_ids(u.user_id for u in users)
    if duplicates:
        raise ValueError(f"Duplicate user ids in {filepath}: {duplicates}")

    logger.info(f"Loaded {len(users)} users")
    return users


def load_trips(filepath: str) -> List[Trip]:
    """
    Load trips from a JSON/YAML file.

    Args:
        filepath: Path to the trips file

    Returns:
        List of Trip objects, in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty, malformed, or a record is invalid
    """
    records = _load_records(filepath, "trips")
    trips = [Trip.from_dict(record) for record in records]

    duplicates = _duplicate_ids(t.trip_id for t in trips)
    if duplicates:
        raise ValueError(f"Duplicate trip ids in {filepath}: {duplicates}")

    destinations = sorted({t.destination for t in trips})
    logger.info(f"Loaded {len(trips)} trips across {len(destinations)} destinations: {destinations}")
    return trips


def _duplicate_ids(ids) -> List[str]:
    seen = set()
    duplicates = []
    for item in ids:
        if item in seen and item not in duplicates:
            duplicates.append(item)
        seen.add(item)
    return duplicates


def users_to_dataframe(users: Sequence[User]) -> pd.DataFrame:
    """
    Flatten users into one row per user.

    Interests are joined with ", " so the frame stays one-dimensional.
    """
    rows = []
    for user in users:
        profile = user.profile
        rows.append({
            "user_id": user.user_id,
            "name": user.name,
            "home_country": user.home_country,
            "current_city": user.current_city,
            "verification_status": user.verification_status.value,
            "budget": profile.budget.value,
            "travel_style": profile.travel_style.value,
            "personality": profile.personality.value if profile.personality else None,
            "language_preference": profile.language_preference,
            "interests": ", ".join(profile.interests),
            "trips_completed": user.stats.trips_completed,
            "average_rating": user.stats.average_rating,
        })
    return pd.DataFrame(rows, columns=[
        "user_id", "name", "home_country", "current_city", "verification_status",
        "budget", "travel_style", "personality", "language_preference", "interests",
        "trips_completed", "average_rating",
    ])


def matches_to_dataframe(matches: Sequence[Match]) -> pd.DataFrame:
    """
    Flatten matches into one row per match, with one column per component.

    Row order follows the input (score-sorted when it comes from the pipeline).
    """
    rows = []
    for match in matches:
        row = {
            "match_id": match.match_id,
            "trip_id": match.trip_id,
            "user_id": match.user.user_id,
            "name": match.user.name,
            "score": match.score,
            "match_status": match.match_status.value,
            "chat_enabled": match.chat_enabled,
            "common_interests": ", ".join(match.match_details.interest_match),
            "budget_compatibility": match.match_details.budget_compatibility.value,
            "location_proximity": match.match_details.location_proximity.value,
        }
        row.update(match.compatibility_score.components)
        rows.append(row)

    df = pd.DataFrame(rows)
    if not df.empty:
        logger.debug(f"Built match frame with {len(df)} rows and {len(df.columns)} columns")
    return df
