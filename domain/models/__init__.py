"""
Domain models - pure data structures representing business entities.
"""

from domain.models.balance_result import BalanceResult
from domain.models.constraint import ConstraintType, TeamConstraint
from domain.models.player import NO_POSITION, Player
from domain.models.team import Team, clone_teams, partition_hash

__all__ = [
    "BalanceResult",
    "ConstraintType",
    "NO_POSITION",
    "Player",
    "Team",
    "TeamConstraint",
    "clone_teams",
    "partition_hash",
]
