"""
Balance result domain model.
"""

from dataclasses import dataclass, field

from domain.models.team import Team


@dataclass
class BalanceResult:
    """Outcome of one balancing call: the teams plus quality metrics and validity flags."""

    teams: list[Team] = field(default_factory=list)
    standard_deviation: float = 0.0  # Population std-dev of team total_skill (2 dp)
    max_diff: float = 0.0  # Strongest minus weakest team total_skill (1 dp)
    imbalance_score: float = 0.0  # Objective value the optimizer minimized
    hash: str = ""  # Partition hash, feed back as history for diversity
    is_valid: bool = True
    is_constraint_violated: bool = False
    is_quota_violated: bool = False
    strategy: str | None = None  # Placement strategy used for the winning chain
    iterations: int = 0  # Annealing iterations run across all chains

    @classmethod
    def empty(cls) -> "BalanceResult":
        """Zero result for a roster with no active players."""
        return cls()

    def team_of(self, player_id: str) -> Team | None:
        """Find the team holding a player, or None."""
        for team in self.teams:
            if team.has_player(player_id):
                return team
        return None
