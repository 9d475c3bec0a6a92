"""
Player domain model.
"""

from dataclasses import dataclass, field, replace

# Sentinel for "no position", used when a player holds no quota slot and has
# no primary preference, or when the roster uses no position system at all.
NO_POSITION = "NONE"

# Preference priority values: lower is better
PRIMARY_PRIORITY = 1
SECONDARY_PRIORITY = 2
TERTIARY_PRIORITY = 3
UNRANKED_PRIORITY = 999

# Skill deduction applied to a player's tier for the position they hold
POSITION_PENALTIES = {
    PRIMARY_PRIORITY: 0.0,
    SECONDARY_PRIORITY: 0.5,
    TERTIARY_PRIORITY: 1.0,
    UNRANKED_PRIORITY: 2.0,
}


@dataclass
class Player:
    """
    Represents a player on the roster.

    This is a pure domain model with no infrastructure dependencies.
    Positions are plain string tags (e.g. "GK", "PG"); a position missing from
    all three preference lists is one the player cannot fill.
    """

    id: str
    name: str = ""
    tier: int = 1
    is_active: bool = True
    primary_positions: list[str] = field(default_factory=list)
    secondary_positions: list[str] = field(default_factory=list)
    tertiary_positions: list[str] = field(default_factory=list)
    assigned_position: str | None = None

    def position_priority(self, position: str | None) -> int:
        """
        Get how strongly this player prefers a position.

        Returns:
            1 for primary, 2 for secondary, 3 for tertiary, 999 otherwise
        """
        if position is None:
            return UNRANKED_PRIORITY
        if position in self.primary_positions:
            return PRIMARY_PRIORITY
        if position in self.secondary_positions:
            return SECONDARY_PRIORITY
        if position in self.tertiary_positions:
            return TERTIARY_PRIORITY
        return UNRANKED_PRIORITY

    def can_play(self, position: str) -> bool:
        """Check if the position appears at any preference level."""
        return self.position_priority(position) != UNRANKED_PRIORITY

    def default_position(self) -> str:
        """First primary preference, or NO_POSITION if the player has none."""
        return self.primary_positions[0] if self.primary_positions else NO_POSITION

    def position_penalty(self) -> float:
        """Tier deduction for the currently assigned position."""
        return POSITION_PENALTIES[self.position_priority(self.assigned_position)]

    def effective_skill(self) -> float:
        """Tier minus the penalty for the position the player holds."""
        return self.tier - self.position_penalty()

    def preference_key(self) -> tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]:
        """Hashable key of the player's position preferences, for caching."""
        return (
            tuple(self.primary_positions),
            tuple(self.secondary_positions),
            tuple(self.tertiary_positions),
        )

    def clone(self) -> "Player":
        """Return an independent copy that can be mutated during exploration."""
        return replace(
            self,
            primary_positions=list(self.primary_positions),
            secondary_positions=list(self.secondary_positions),
            tertiary_positions=list(self.tertiary_positions),
        )

    def __str__(self) -> str:
        position = self.assigned_position or NO_POSITION
        return f"{self.name or self.id} (Tier: {self.tier}, Pos: {position})"
