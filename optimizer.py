"""
Simulated annealing over pairwise player swaps.
"""

import logging
import math
import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from config import ANNEALING_SETTINGS, STRICT_QUOTA_SWAPS
from domain.models.constraint import TeamConstraint
from domain.models.team import Team, clone_teams
from domain.services.position_assignment_service import PositionAssignmentService
from domain.services.swap_service import can_swap, swap_players
from domain.services.team_scoring_service import TeamScoringService

logger = logging.getLogger("team_balancer.optimizer")


@dataclass
class AnnealingTrace:
    """Bookkeeping for one annealing run."""

    iterations: int = 0
    accepted: int = 0  # Moves taken, improving or not
    rejected: int = 0  # Legal moves refused by the acceptance rule
    skipped: int = 0  # Empty team, single team, or illegal swap
    improvements: int = 0  # Moves that lowered the best score
    initial_score: float = 0.0
    final_temperature: float = 0.0
    best_scores: list[float] = field(default_factory=list)  # Best score after each iteration


@dataclass
class OptimizationOutcome:
    """Best assignment found, its score, and the run's trace."""

    teams: list[Team]
    score: float
    trace: AnnealingTrace


class SwapOptimizer:
    """
    Improves an assignment by swapping one player between two teams at a time.

    Worsening swaps are accepted with probability exp(-delta / temperature);
    the temperature decays geometrically every iteration. The best state ever
    seen is returned, not the last one.
    """

    def __init__(
        self,
        scoring_service: TeamScoringService | None = None,
        position_service: PositionAssignmentService | None = None,
        initial_temperature: float | None = None,
        cooling_rate: float | None = None,
        min_temperature: float | None = None,
        max_iterations: int | None = None,
        strict_quotas: bool | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the optimizer.

        Args:
            scoring_service: Objective to minimize
            position_service: Used to reassign positions after a swap when quotas are active
            initial_temperature: Starting temperature (default 200)
            cooling_rate: Temperature multiplier per iteration, < 1 (default 0.997)
            min_temperature: Stop once the temperature falls below this (default 0.05)
            max_iterations: Iteration budget (default 3000)
            strict_quotas: Reject swaps that break an exact quota match (default True)
            rng: Random source; a fresh unseeded one if omitted
        """
        settings = ANNEALING_SETTINGS
        self.scoring_service = scoring_service or TeamScoringService()
        self.position_service = position_service or PositionAssignmentService()
        self.initial_temperature = (
            initial_temperature
            if initial_temperature is not None
            else settings["initial_temperature"]
        )
        self.cooling_rate = cooling_rate if cooling_rate is not None else settings["cooling_rate"]
        self.min_temperature = (
            min_temperature
            if min_temperature is not None
            else settings["min_temperature"]
        )
        self.max_iterations = (
            max_iterations
            if max_iterations is not None
            else settings["max_iterations"]
        )
        self.strict_quotas = strict_quotas if strict_quotas is not None else STRICT_QUOTA_SWAPS
        self.rng = rng or random.Random()

        if not 0 < self.cooling_rate < 1:
            raise ValueError(f"cooling_rate must be in (0, 1), got {self.cooling_rate}")

    def optimize(
        self,
        initial_teams: list[Team],
        constraints: Iterable[TeamConstraint] | None = None,
        quotas: Mapping[str, int | None] | None = None,
        previous_hashes: Sequence[str] | None = None,
    ) -> OptimizationOutcome:
        """
        Run simulated annealing from an initial assignment.

        The input teams are not mutated. If no legal swap is ever found (one
        team, or every pair blocked) the budget runs out on no-op iterations
        and the initial assignment comes back unchanged.

        Args:
            initial_teams: Seed assignment
            constraints: MATCH/SPLIT constraints
            quotas: Per-team position quotas
            previous_hashes: Partition hashes of earlier runs

        Returns:
            OptimizationOutcome with the best assignment seen
        """
        constraints = list(constraints or ())
        previous_hashes = list(previous_hashes or ())
        scorer = self.scoring_service
        rng = self.rng

        current = clone_teams(initial_teams)
        current_score = scorer.evaluate(current, constraints, quotas, previous_hashes)
        best, best_score = current, current_score
        temperature = self.initial_temperature
        trace = AnnealingTrace(initial_score=current_score)
        team_count = len(current)

        for _ in range(self.max_iterations):
            if temperature < self.min_temperature:
                break
            trace.iterations += 1

            candidate = None
            if team_count >= 2:
                a_idx = rng.randrange(team_count)
                b_idx = rng.randrange(team_count - 1)
                if b_idx >= a_idx:
                    b_idx += 1
                team_a, team_b = current[a_idx], current[b_idx]
                if team_a.players and team_b.players:
                    player_a = rng.choice(team_a.players)
                    player_b = rng.choice(team_b.players)
                    if can_swap(
                        player_a, a_idx, player_b, b_idx, current, constraints, quotas, self.strict_quotas
                    ):
                        candidate = swap_players(
                            current, player_a, a_idx, player_b, b_idx, quotas, self.position_service
                        )

            if candidate is None:
                trace.skipped += 1
            else:
                candidate_score = scorer.evaluate(candidate, constraints, quotas, previous_hashes)
                delta = candidate_score - current_score
                if delta < 0 or rng.random() < math.exp(-delta / temperature):
                    current, current_score = candidate, candidate_score
                    trace.accepted += 1
                    if current_score < best_score:
                        best, best_score = current, current_score
                        trace.improvements += 1
                else:
                    trace.rejected += 1

            temperature *= self.cooling_rate
            trace.best_scores.append(best_score)

        trace.final_temperature = temperature
        logger.debug(
            f"Annealing: {trace.iterations} iterations, {trace.accepted} accepted, "
            f"{trace.rejected} rejected, {trace.skipped} skipped; "
            f"score {trace.initial_score:.3f} -> {best_score:.3f}"
        )
        return OptimizationOutcome(clone_teams(best), best_score, trace)
