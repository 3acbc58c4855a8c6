"""Shared fixtures for the tripmatch test suite."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from tripmatch.schema import User, Trip

PROJECT_ROOT = Path(__file__).resolve().parent.parent
FIXED_NOW = datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)


def make_user(user_id, **overrides):
    """A verified, experienced Bengaluru traveler; override any field."""
    profile = {
        "budget": "Medium",
        "travel_style": "Standard",
        "interests": ["Food", "Culture", "Photography"],
        "personality": "Extrovert",
        "language_preference": "English",
    }
    profile.update(overrides.pop("profile", {}))
    data = {
        "user_id": user_id,
        "name": f"User {user_id}",
        "home_country": "India",
        "current_city": "Bengaluru",
        "verification_status": "Verified",
        "profile": profile,
        "stats": {"trips_completed": 10, "average_rating": 5.0},
    }
    data.update(overrides)
    return User.from_dict(data)


def make_trip(trip_id, user_id, **overrides):
    """A Goa trip over 2026-03-11..16 at Medium budget; override any field."""
    data = {
        "trip_id": trip_id,
        "user_id": user_id,
        "destination": "Goa",
        "start_date": "2026-03-11",
        "end_date": "2026-03-16",
        "travel_type": "Leisure",
        "budget": "Medium",
    }
    data.update(overrides)
    return Trip.from_dict(data)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def requester():
    return make_user("r", stats={"trips_completed": 12, "average_rating": 4.6})


@pytest.fixture
def requester_trip():
    return make_trip("t-r-goa", "r")


@pytest.fixture
def goa_candidate():
    """Shares 2 of 4 interests, Ambivert, Mumbai, 5 trips rated 4.0."""
    return make_user(
        "c1",
        current_city="Mumbai",
        profile={
            "travel_style": "Adventure",
            "interests": ["Food", "Adventure", "Photography"],
            "personality": "Ambivert",
        },
        stats={"trips_completed": 5, "average_rating": 4.0},
    )


@pytest.fixture
def goa_candidate_trip():
    return make_trip("t-c1-goa", "c1", start_date="2026-03-09", end_date="2026-03-13")


@pytest.fixture
def pool(requester, requester_trip, goa_candidate, goa_candidate_trip):
    """
    Mixed candidate pool for pipeline tests.

    twin1/twin2 score 100, c1 scores 66, low scores under 60; elsewhere,
    later and no_trip never pass the hard filters.
    """
    low = make_user(
        "low",
        home_country="Spain",
        current_city="Madrid",
        verification_status="Unverified",
        profile={
            "budget": "High",
            "travel_style": "Luxury",
            "interests": ["Shopping", "Wine"],
            "personality": "Introvert",
        },
        stats={"trips_completed": 0, "average_rating": 0.0},
    )
    users = [
        requester,
        make_user("twin1"),
        make_user("twin2"),
        goa_candidate,
        low,
        make_user("elsewhere"),
        make_user("later"),
        make_user("no_trip"),
    ]
    trips = [
        requester_trip,
        make_trip("t-twin1", "twin1"),
        make_trip("t-twin2", "twin2", destination="  GOA "),
        goa_candidate_trip,
        make_trip("t-low", "low", start_date="2026-03-16", end_date="2026-03-20", budget="High"),
        make_trip("t-elsewhere", "elsewhere", destination="Kerala"),
        make_trip("t-later", "later", start_date="2026-03-20", end_date="2026-03-24"),
    ]
    return users, trips


@pytest.fixture
def config_path():
    return str(PROJECT_ROOT / "configs" / "config.yaml")


@pytest.fixture
def sample_users_path():
    return str(PROJECT_ROOT / "data" / "sample_users.json")


@pytest.fixture
def sample_trips_path():
    return str(PROJECT_ROOT / "data" / "sample_trips.json")
