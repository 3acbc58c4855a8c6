"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
validates that the scoring weights and match thresholds are usable.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ["global", "scoring", "matching"]

WEIGHT_KEYS = [
    "interest_similarity",
    "budget_compatibility",
    "travel_style_match",
    "personality_match",
    "schedule_overlap",
    "location_proximity",
    "verification_bonus",
    "experience_bonus",
]


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Read the matcher configuration.

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the file is empty or its top level is not a mapping
        yaml.YAMLError: If the YAML cannot be parsed
    """
    path = Path(filepath)
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    config = yaml.safe_load(path.read_text())

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")
    if not isinstance(config, dict):
        raise ValueError(
            f"Configuration must be a mapping, got {type(config).__name__}: {filepath}"
        )

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    for section in REQUIRED_SECTIONS:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    # Check scoring weights sum to 1
    weights = get_config_value(config, "scoring.weights")
    if weights is not None:
        unknown = sorted(set(weights) - set(WEIGHT_KEYS))
        if unknown:
            issues.append(f"Unknown scoring weights: {unknown}")
        negative = sorted(k for k, v in weights.items() if v < 0)
        if negative:
            issues.append(f"Scoring weights must be non-negative: {negative}")
        total = sum(weights.values())
        if abs(total - 1.0) > 0.01:
            issues.append(f"Scoring weights don't sum to 1: {total}")

    # Check thresholds are ordered
    thresholds = get_config_value(config, "matching.thresholds")
    if thresholds is not None:
        recommended = thresholds.get("recommended", 80)
        pending = thresholds.get("pending", 60)
        group_eligible = thresholds.get("group_eligible", 70)
        for name, value in [("recommended", recommended), ("pending", pending),
                            ("group_eligible", group_eligible)]:
            if not 0 <= value <= 100:
                issues.append(f"Threshold {name} must be in [0, 100], got {value}")
        if pending > recommended:
            issues.append(f"Pending threshold ({pending}) exceeds recommended threshold ({recommended})")

    if "global" in config and "log_level" not in config["global"]:
        issues.append("Missing global.log_level (defaulting to INFO)")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Look up a nested value by dotted path, e.g. "matching.thresholds.pending"."""
    node: Any = config
    for key in path.split("."):
        if not isinstance(node, dict) or key not in node:
            return default
        node = node[key]
    return node
