"""
Team domain model.
"""

from domain.models.player import NO_POSITION, Player

# Separators used by partition_hash; player ids must not contain them
HASH_ID_SEPARATOR = ","
HASH_TEAM_SEPARATOR = "|"


def team_name_for_index(index: int) -> str:
    """Display name for the team at a zero-based index: Team A, Team B, ..."""
    letters = ""
    n = index
    while True:
        letters = chr(ord("A") + n % 26) + letters
        n = n // 26 - 1
        if n < 0:
            break
    return f"Team {letters}"


class Team:
    """
    Represents one team of an assignment.

    This is a pure domain model with no infrastructure dependencies.
    total_skill is a cache of the sum of each player's tier minus their
    position penalty; call recalculate_skill() after changing players or
    their assigned positions.
    """

    def __init__(
        self,
        id: int,
        name: str | None = None,
        players: list[Player] | None = None,
        total_skill: float = 0.0,
    ):
        self.id = id
        self.name = name if name is not None else team_name_for_index(id - 1)
        self.players = players if players is not None else []
        self.total_skill = total_skill

    def recalculate_skill(self) -> float:
        """Recompute total_skill from the current players, rounded to 1 dp."""
        self.total_skill = round(sum(p.effective_skill() for p in self.players), 1)
        return self.total_skill

    def player_ids(self) -> set[str]:
        return {p.id for p in self.players}

    def has_player(self, player_id: str) -> bool:
        return any(p.id == player_id for p in self.players)

    def count_position(self, position: str) -> int:
        """Count players whose assigned position equals the given tag."""
        return sum(1 for p in self.players if p.assigned_position == position)

    def get_position_distribution(self) -> dict[str, int]:
        """
        Get assigned position counts for this team.

        Returns:
            Dictionary mapping position tag to player count
        """
        distribution: dict[str, int] = {}
        for player in self.players:
            position = player.assigned_position or NO_POSITION
            distribution[position] = distribution.get(position, 0) + 1
        return distribution

    def clone(self) -> "Team":
        """Deep copy: the clone's players can be mutated independently."""
        return Team(
            self.id,
            self.name,
            [p.clone() for p in self.players],
            self.total_skill,
        )

    def __len__(self) -> int:
        return len(self.players)

    def __str__(self) -> str:
        player_names = ", ".join(p.name or p.id for p in self.players)
        return f"{self.name} ({self.total_skill}): {player_names}"


def clone_teams(teams: list[Team]) -> list[Team]:
    """Deep copy a whole assignment."""
    return [team.clone() for team in teams]


def partition_hash(teams: list[Team]) -> str:
    """
    Encode an assignment as a string for diversity history.

    Each team's ids are sorted and comma-joined; the team strings are sorted
    and joined by "|", so the encoding ignores team order and player order.
    Empty teams are left out.
    """
    team_keys = sorted(
        HASH_ID_SEPARATOR.join(sorted(p.id for p in team.players)) for team in teams if team.players
    )
    return HASH_TEAM_SEPARATOR.join(team_keys)
