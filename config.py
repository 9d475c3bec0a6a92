"""
Centralized configuration for the team balancer.
"""

from __future__ import annotations

import os
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _parse_int(env_var: str, default: int) -> int:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_float(env_var: str, default: float) -> float:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_bool(env_var: str, default: bool) -> bool:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _parse_choice(env_var: str, default: str, choices: set[str]) -> str:
    raw = os.getenv(env_var)
    if raw is None:
        return default
    value = raw.strip().lower()
    return value if value in choices else default


# Simulated annealing schedule
ANNEALING_SETTINGS: dict[str, Any] = {
    "initial_temperature": _parse_float("ANNEALING_INITIAL_TEMPERATURE", 200.0),
    "cooling_rate": _parse_float("ANNEALING_COOLING_RATE", 0.997),
    "min_temperature": _parse_float("ANNEALING_MIN_TEMPERATURE", 0.05),
    "max_iterations": _parse_int("ANNEALING_MAX_ITERATIONS", 3000),
    # Independent placement + annealing chains per call; best one wins
    "chains": max(1, _parse_int("ANNEALING_CHAINS", 1)),
}

# Penalty weights, strictly ordered: structure >> diversity >> skill balance
SCORING_WEIGHTS: dict[str, float] = {
    "size": _parse_float("SIZE_IMBALANCE_WEIGHT", 100_000_000.0),
    "constraint": _parse_float("CONSTRAINT_VIOLATION_WEIGHT", 100_000_000.0),
    "quota": _parse_float("QUOTA_VIOLATION_WEIGHT", 100_000_000.0),
    "similarity": _parse_float("PAIR_SIMILARITY_WEIGHT", 10_000_000.0),
    "skill": _parse_float("SKILL_STDDEV_WEIGHT", 1.0),
    "preference": _parse_float("POSITION_PREFERENCE_WEIGHT", 1.0),
}

# How overlap with several previous runs is aggregated: "max", "union" or "mean"
SIMILARITY_POLICY = _parse_choice("PAIR_SIMILARITY_POLICY", "max", {"max", "union", "mean"})

# Reject swaps that would break an exact per-team quota match
STRICT_QUOTA_SWAPS = _parse_bool("STRICT_QUOTA_SWAPS", True)

# Number of previous partition hashes remembered by BalanceService
DIVERSITY_HISTORY_SIZE = _parse_int("DIVERSITY_HISTORY_SIZE", 10)
