"""
Pytest fixtures for tests.

This module provides shared roster builders and fixtures to reduce
duplication across the test suite.
"""

import random

import pytest

from domain.models.player import Player
from utils.position_assignment_cache import clear_position_assignment_cache


def make_player(player_id: str, tier: int = 3, *, primary=None, secondary=None, tertiary=None, active=True) -> Player:
    """Build a player with an id-derived name."""
    return Player(
        id=player_id,
        name=f"Player {player_id}",
        tier=tier,
        is_active=active,
        primary_positions=list(primary or []),
        secondary_positions=list(secondary or []),
        tertiary_positions=list(tertiary or []),
    )


def make_roster(tiers: list[int], prefix: str = "p") -> list[Player]:
    """One position-less player per tier value, ids p0, p1, ..."""
    return [make_player(f"{prefix}{i}", tier) for i, tier in enumerate(tiers)]


def all_ids(teams) -> list[str]:
    """Every player id across an assignment, duplicates included."""
    return [p.id for team in teams for p in team.players]


@pytest.fixture(autouse=True)
def clear_caches():
    """
    Clear global caches before and after each test to prevent cross-test contamination.

    The position assignment cache is process-global (LRU cache).
    """
    clear_position_assignment_cache()
    yield
    clear_position_assignment_cache()


@pytest.fixture
def rng():
    """Seeded random source so exact-outcome assertions are reproducible."""
    return random.Random(1234)


@pytest.fixture
def fifteen_players():
    """15 players across five tiers, no positions."""
    return make_roster([10, 10, 8, 8, 8, 6, 6, 6, 6, 6, 6, 4, 4, 4, 2])


@pytest.fixture
def futsal_players():
    """8 futsal players: 2 keepers, 6 outfield players with layered preferences."""
    return [
        make_player("gk1", 4, primary=["GK"]),
        make_player("gk2", 3, primary=["GK"], secondary=["FIX"]),
        make_player("f1", 5, primary=["PIV"], secondary=["ALA"]),
        make_player("f2", 4, primary=["ALA"], secondary=["PIV"]),
        make_player("f3", 3, primary=["FIX"], tertiary=["ALA"]),
        make_player("f4", 2, primary=["ALA"], secondary=["FIX"]),
        make_player("f5", 3, primary=["PIV", "ALA"]),
        make_player("f6", 1, primary=["FIX"], secondary=["ALA"], tertiary=["PIV"]),
    ]
