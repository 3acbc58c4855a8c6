"""Data loading module for the candidate pool (users and trips)."""

from .loaders import load_users, load_trips, users_to_dataframe, matches_to_dataframe

__all__ = ["load_users", "load_trips", "users_to_dataframe", "matches_to_dataframe"]
