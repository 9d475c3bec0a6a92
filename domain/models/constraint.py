"""
Pairing constraint domain model.
"""

from dataclasses import dataclass, field
from enum import Enum


class ConstraintType(str, Enum):
    """MATCH: players must share a team. SPLIT: players must not share a team."""

    MATCH = "MATCH"
    SPLIT = "SPLIT"


@dataclass
class TeamConstraint:
    """
    A hard pairing requirement between two or more players.

    The canonical form is a pair, but larger groups are accepted.
    """

    type: ConstraintType
    player_ids: list[str] = field(default_factory=list)
    id: str | None = None

    @property
    def is_match(self) -> bool:
        return self.type == ConstraintType.MATCH

    @property
    def is_split(self) -> bool:
        return self.type == ConstraintType.SPLIT

    def involves(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def partners_of(self, player_id: str) -> list[str]:
        """Other members of this constraint."""
        return [pid for pid in self.player_ids if pid != player_id]
