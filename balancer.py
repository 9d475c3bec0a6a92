"""
Balanced team generation: placement, annealing, validation.
"""

import logging
import random
from collections.abc import Iterable, Mapping, Sequence

from config import ANNEALING_SETTINGS
from domain.models.balance_result import BalanceResult
from domain.models.constraint import TeamConstraint
from domain.models.player import Player
from domain.models.team import partition_hash
from domain.services.initial_placement_service import (
    InitialPlacementBuilder,
    PlacementStrategy,
    choose_strategy,
)
from domain.services.position_assignment_service import (
    PositionAssignmentService,
    numeric_quotas,
)
from domain.services.team_scoring_service import (
    TeamScoringService,
    find_constraint_violations,
    find_quota_violations,
    max_skill_gap,
    skill_standard_deviation,
)
from optimizer import OptimizationOutcome, SwapOptimizer

logger = logging.getLogger("team_balancer.balancer")


class TeamBalancer:
    """
    Splits a roster into balanced teams.

    Builds a constraint-aware seed assignment, improves it with simulated
    annealing, then validates constraints and quotas independently of the
    optimizer's penalties. An imperfect result is still returned; the flags
    tell the caller whether to accept it, retry or warn.
    """

    def __init__(
        self,
        optimizer: SwapOptimizer | None = None,
        scoring_service: TeamScoringService | None = None,
        position_service: PositionAssignmentService | None = None,
        chains: int | None = None,
        ignore_tier: bool = False,
        rng: random.Random | None = None,
    ):
        """
        Initialize the balancer.

        Args:
            optimizer: Annealing optimizer (built from config if omitted)
            scoring_service: Objective; shared with the optimizer when both are built here
            position_service: Position assigner used by placement and swaps
            chains: Independent placement + annealing runs per call, best kept (default 1)
            ignore_tier: Balance structure and diversity only, not skill
            rng: Random source for placement, strategy choice and annealing
        """
        self.rng = rng or random.Random()
        self.position_service = position_service or PositionAssignmentService()
        self.scoring_service = scoring_service or TeamScoringService(ignore_tier=ignore_tier)
        self.optimizer = optimizer or SwapOptimizer(
            scoring_service=self.scoring_service,
            position_service=self.position_service,
            rng=self.rng,
        )
        self.builder = InitialPlacementBuilder(self.position_service, self.rng)
        self.chains = max(1, chains if chains is not None else ANNEALING_SETTINGS["chains"])

    def generate_balanced_teams(
        self,
        players: Sequence[Player],
        team_count: int,
        quotas: Mapping[str, int | None] | None = None,
        constraints: Iterable[TeamConstraint] | None = None,
        previous_hashes: Sequence[str] | None = None,
        strategy: PlacementStrategy | None = None,
    ) -> BalanceResult:
        """
        Assign the active players to team_count balanced teams.

        Args:
            players: Roster; inactive players are left out
            team_count: Number of teams (>= 1)
            quotas: Per-team position quotas; None values mean unconstrained
            constraints: MATCH/SPLIT constraints
            previous_hashes: Partition hashes of earlier runs, to avoid repeating pairings
            strategy: Placement strategy; picked at random per chain if omitted

        Returns:
            BalanceResult with teams, metrics and validity flags
        """
        if team_count < 1:
            raise ValueError(f"Need at least 1 team, got {team_count}")

        active = [p for p in players if p.is_active]
        if not active:
            logger.info("No active players, returning empty result")
            return BalanceResult.empty()

        constraints = list(constraints or ())
        previous_hashes = list(previous_hashes or ())
        if team_count > len(active):
            logger.warning(
                f"{team_count} teams requested for {len(active)} active players; some teams will be empty"
            )
        self._warn_on_quota_shortage(active, team_count, quotas)

        best: OptimizationOutcome | None = None
        best_strategy: PlacementStrategy | None = None
        total_iterations = 0
        for chain in range(self.chains):
            chain_strategy = strategy or choose_strategy(self.rng)
            initial = self.builder.build(active, team_count, constraints, quotas, chain_strategy)
            outcome = self.optimizer.optimize(initial, constraints, quotas, previous_hashes)
            total_iterations += outcome.trace.iterations
            if self.chains > 1:
                logger.debug(f"Chain {chain + 1}/{self.chains} ({chain_strategy.value}): score={outcome.score:.3f}")
            if best is None or outcome.score < best.score:
                best, best_strategy = outcome, chain_strategy

        teams = best.teams
        constraint_violations = find_constraint_violations(teams, constraints)
        quota_violations = find_quota_violations(teams, quotas)
        is_constraint_violated = bool(constraint_violations)
        is_quota_violated = bool(quota_violations)

        result = BalanceResult(
            teams=teams,
            standard_deviation=round(skill_standard_deviation(teams), 2),
            max_diff=round(max_skill_gap(teams), 1),
            imbalance_score=self.scoring_service.evaluate(teams, constraints, quotas, previous_hashes),
            hash=partition_hash(teams),
            is_valid=not is_constraint_violated and not is_quota_violated,
            is_constraint_violated=is_constraint_violated,
            is_quota_violated=is_quota_violated,
            strategy=best_strategy.value,
            iterations=total_iterations,
        )

        logger.info(
            f"Balanced {len(active)} players into {team_count} teams "
            f"(strategy={result.strategy}, SD={result.standard_deviation}, "
            f"gap={result.max_diff}, score={result.imbalance_score:.3f})"
        )
        if logger.isEnabledFor(logging.DEBUG):
            for team in teams:
                off_position = self.position_service.count_off_position(team.players)
                logger.debug(f"  {team} [off-position: {off_position}]")
        if is_constraint_violated:
            logger.warning(
                f"{len(constraint_violations)} constraint(s) could not be satisfied: "
                + ", ".join(f"{c.type.value}{c.player_ids}" for c in constraint_violations)
            )
        if is_quota_violated:
            logger.warning(
                "Position quotas not met: "
                + ", ".join(f"team {v.team_id} {v.position} {v.count}/{v.quota}" for v in quota_violations)
            )
        return result

    def _warn_on_quota_shortage(
        self,
        active: list[Player],
        team_count: int,
        quotas: Mapping[str, int | None] | None,
    ) -> None:
        quota_items = numeric_quotas(quotas)
        if not quota_items:
            return
        coverage = self.position_service.get_position_coverage(active, [pos for pos, _ in quota_items])
        for position, quota in quota_items:
            needed = quota * team_count
            if len(coverage[position]) < needed:
                logger.warning(
                    f"Only {len(coverage[position])} players can play {position}, {needed} needed"
                )


def generate_balanced_teams(
    players: Sequence[Player],
    team_count: int,
    quotas: Mapping[str, int | None] | None = None,
    constraints: Iterable[TeamConstraint] | None = None,
    previous_hashes: Sequence[str] | None = None,
    strategy: PlacementStrategy | None = None,
    ignore_tier: bool = False,
    rng: random.Random | None = None,
) -> BalanceResult:
    """
    Balance a roster with configuration defaults.

    Convenience wrapper around TeamBalancer; see TeamBalancer.generate_balanced_teams.
    """
    balancer = TeamBalancer(ignore_tier=ignore_tier, rng=rng)
    return balancer.generate_balanced_teams(
        players,
        team_count,
        quotas=quotas,
        constraints=constraints,
        previous_hashes=previous_hashes,
        strategy=strategy,
    )
