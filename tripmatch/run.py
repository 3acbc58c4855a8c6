"""
Command-line runner for the travel companion matching pipeline.

Usage:
    python -m tripmatch.run --config configs/config.yaml --user-id u1

The runner performs the following steps:
1. Load and validate configuration
2. Load the candidate pool (users and trips)
3. Validate the requester's trip
4. Run the matching pipeline
5. Report score statistics
6. Optionally save matches, groups and the run report
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Any, Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def run_pipeline(
    config_path: str,
    user_id: str,
    trip_id: Optional[str] = None,
    output_dir: Optional[str] = None,
    save: bool = False
) -> Dict[str, Any]:
    """
    Run matching for one requester over the configured candidate pool.

    Args:
        config_path: Path to the configuration YAML file
        user_id: The requesting user's id
        trip_id: The requester's trip (their first trip if None)
        output_dir: Directory for saved outputs (overrides config output.dir)
        save: Write matches, groups and the run report to disk

    Returns:
        Dictionary with success flag, result, report and written paths
    """
    from .configs import load_config, validate_config
    from .data_loading import load_users, load_trips, matches_to_dataframe
    from .evaluation import create_run_report
    from .matching import MatchingPipeline
    from .validation import validate_trip_input

    logger.info("=" * 60)
    logger.info("TRAVEL COMPANION MATCHING")
    logger.info("=" * 60)

    config = load_config(config_path)
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(config.get("global", {}).get("log_level", "INFO"))

    # =========================================================================
    # Load the candidate pool
    # =========================================================================
    data_config = config.get("data", {})
    users = load_users(data_config.get("users_path", "data/sample_users.json"))
    trips = load_trips(data_config.get("trips_path", "data/sample_trips.json"))

    requester = next((u for u in users if u.user_id == user_id), None)
    if requester is None:
        logger.error(f"Unknown user: {user_id}")
        return {"success": False, "errors": [f"Unknown user: {user_id}"]}

    own_trips = [t for t in trips if t.user_id == user_id]
    if trip_id is not None:
        own_trips = [t for t in own_trips if t.trip_id == trip_id]
    if not own_trips:
        message = f"No trip found for user {user_id}" + (f" with id {trip_id}" if trip_id else "")
        logger.error(message)
        return {"success": False, "errors": [message]}
    trip = own_trips[0]

    # =========================================================================
    # Validate and match
    # =========================================================================
    errors = validate_trip_input(trip)
    if errors:
        for error in errors:
            logger.error(f"Trip {trip.trip_id}: {error}")
        return {"success": False, "errors": errors}

    pipeline = MatchingPipeline.from_config(config)
    result = pipeline.run(requester, trip, users, trips)
    report = create_run_report(result, trip.trip_id)

    logger.info("\n" + report.summary())
    for match in result.matches:
        logger.info(
            f"  {match.score:3d}  {match.match_status.value:<11} {match.user.name} "
            f"({', '.join(match.match_details.interest_match) or 'no shared interests'})"
        )

    # =========================================================================
    # Save outputs
    # =========================================================================
    paths: Dict[str, str] = {}
    if save:
        out = Path(output_dir or config.get("output", {}).get("dir", "artifacts"))
        out.mkdir(parents=True, exist_ok=True)

        result_path = out / f"matches_{trip.trip_id}.json"
        with open(result_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2)
        paths["result"] = str(result_path)

        report_path = out / f"report_{trip.trip_id}.json"
        report.save(str(report_path))
        paths["report"] = str(report_path)

        csv_path = out / f"matches_{trip.trip_id}.csv"
        matches_to_dataframe(result.matches).to_csv(csv_path, index=False)
        paths["matches_csv"] = str(csv_path)

        logger.info(f"Saved outputs to {out}")

    return {"success": True, "result": result, "report": report, "paths": paths}


def main():
    """Main entry point for the matching runner."""
    parser = argparse.ArgumentParser(
        description="Find travel companions for one user's trip"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--user-id",
        type=str,
        required=True,
        help="Id of the requesting user"
    )
    parser.add_argument(
        "--trip-id",
        type=str,
        default=None,
        help="Requester's trip id (defaults to their first trip)"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for saved results (overrides config)"
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Write matches, groups and the run report to the output directory"
    )

    args = parser.parse_args()

    try:
        result = run_pipeline(
            args.config, args.user_id, trip_id=args.trip_id,
            output_dir=args.output_dir, save=args.save
        )
        if result["success"]:
            logger.info("\nMatching completed successfully!")
            return 0
        else:
            logger.error("\nMatching failed!")
            return 1
    except Exception as e:
        logger.exception(f"Matching failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
