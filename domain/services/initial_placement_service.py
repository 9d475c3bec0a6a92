"""
Initial placement domain service.

Builds the seed assignment the optimizer starts from: constraint groups
first, then quota'd positions, then everyone else onto the smallest team.
The seed does not guarantee constraint or quota satisfaction.
"""

import logging
import random
from collections.abc import Iterable, Mapping
from enum import Enum

from domain.models.constraint import TeamConstraint
from domain.models.player import Player
from domain.models.team import Team
from domain.services.constraint_analysis_service import analyze_constraint_groups
from domain.services.position_assignment_service import (
    PositionAssignmentService,
    numeric_quotas,
)

logger = logging.getLogger("team_balancer.placement")


class PlacementStrategy(str, Enum):
    """Order in which tier groups are dealt out during quota placement."""

    RANDOM = "random"
    HIGH_TO_LOW = "high-to-low"
    LOW_TO_HIGH = "low-to-high"
    SNAKE = "snake"


def order_tiers(tiers: Iterable[int], strategy: PlacementStrategy, rng: random.Random) -> list[int]:
    """
    Order distinct tier values for dealing.

    Deterministic for every strategy except RANDOM, which shuffles with rng.

    Examples:
        >>> order_tiers([1, 3, 2, 5], PlacementStrategy.SNAKE, rng)
        [5, 1, 3, 2]
    """
    descending = sorted(set(tiers), reverse=True)
    if strategy == PlacementStrategy.HIGH_TO_LOW:
        return descending
    if strategy == PlacementStrategy.LOW_TO_HIGH:
        return descending[::-1]
    if strategy == PlacementStrategy.SNAKE:
        # Zigzag from both ends: highest, lowest, second highest, second lowest, ...
        ordered = []
        low, high = 0, len(descending) - 1
        while low <= high:
            ordered.append(descending[low])
            if low != high:
                ordered.append(descending[high])
            low += 1
            high -= 1
        return ordered
    shuffled = list(descending)
    rng.shuffle(shuffled)
    return shuffled


def choose_strategy(rng: random.Random | None = None) -> PlacementStrategy:
    """Pick a placement strategy uniformly at random."""
    rng = rng or random
    return rng.choice(list(PlacementStrategy))


def least_populated_index(teams: list[Team]) -> int:
    """Index of the team with the fewest players; ties go to the lowest index."""
    return min(range(len(teams)), key=lambda i: len(teams[i].players))


class InitialPlacementBuilder:
    """
    Pure domain service for building a seed assignment.

    Responsibilities:
    - Keep MATCH groups together and deal SPLIT groups apart
    - Deal quota'd positions round-robin to the teams still short of them,
      never past an even share of the roster
    - Fill the remaining players onto the least-populated teams
    """

    def __init__(
        self,
        position_service: PositionAssignmentService | None = None,
        rng: random.Random | None = None,
    ):
        self.position_service = position_service or PositionAssignmentService()
        self.rng = rng or random.Random()

    def build(
        self,
        players: list[Player],
        team_count: int,
        constraints: Iterable[TeamConstraint] | None = None,
        quotas: Mapping[str, int | None] | None = None,
        strategy: PlacementStrategy = PlacementStrategy.RANDOM,
    ) -> list[Team]:
        """
        Build a seed assignment of the active players.

        Players are cloned as they are placed, so the caller's roster is
        never mutated.

        Args:
            players: Roster; inactive players are ignored
            team_count: Number of teams to create (>= 1)
            constraints: MATCH/SPLIT constraints
            quotas: Per-team position quotas
            strategy: Tier ordering used while dealing quota'd positions

        Returns:
            List of team_count teams partitioning the active players
        """
        if team_count < 1:
            raise ValueError(f"Need at least 1 team, got {team_count}")

        teams = [Team(i + 1) for i in range(team_count)]
        active = [p for p in players if p.is_active]
        by_id = {p.id: p for p in active}
        assigned: set[str] = set()
        groups = analyze_constraint_groups(constraints)

        def place(player: Player, team_idx: int, position: str | None = None) -> None:
            clone = player.clone()
            clone.assigned_position = position
            teams[team_idx].players.append(clone)
            assigned.add(player.id)

        def resolve(group: list[str]) -> list[Player]:
            resolved = []
            for player_id in dict.fromkeys(group):
                if player_id in by_id and player_id not in assigned:
                    resolved.append(by_id[player_id])
            return resolved

        # 1. MATCH groups go whole into the smallest team
        for group in groups.match_groups:
            members = resolve(group)
            if not members:
                continue
            target = least_populated_index(teams)
            for player in members:
                place(player, target)

        # 2. SPLIT groups are dealt across teams, smallest first
        for group in groups.split_groups:
            members = resolve(group)
            if not members:
                continue
            by_size = sorted(range(team_count), key=lambda i: len(teams[i].players))
            for idx, player in enumerate(members):
                place(player, by_size[idx % team_count])

        # 3. Quota'd positions are dealt round-robin, smallest team first, to
        # teams still short of the quota and with room left
        base_size, oversized_slots = divmod(len(active), team_count)

        def has_room(team_idx: int) -> bool:
            size = len(teams[team_idx].players)
            if size != base_size:
                return size < base_size
            return sum(1 for t in teams if len(t.players) > base_size) < oversized_slots

        for position, quota in numeric_quotas(quotas):
            candidates = [p for p in active if p.id not in assigned and p.can_play(position)]
            if not candidates:
                logger.debug(f"No eligible players left for position {position}")
                continue

            shortfall = [
                quota - self.position_service.claimed_counts(team.players, quotas).get(position, 0)
                for team in teams
            ]

            by_tier: dict[int, list[Player]] = {}
            for player in candidates:
                by_tier.setdefault(player.tier, []).append(player)
            for tier_players in by_tier.values():
                self.rng.shuffle(tier_players)

            dealing_order = [p for tier in order_tiers(by_tier, strategy, self.rng) for p in by_tier[tier]]
            next_idx = 0
            for _ in range(quota):
                by_size = sorted(range(team_count), key=lambda i: len(teams[i].players))
                for team_idx in by_size:
                    if next_idx >= len(dealing_order):
                        break
                    if shortfall[team_idx] <= 0 or not has_room(team_idx):
                        continue
                    place(dealing_order[next_idx], team_idx, position)
                    shortfall[team_idx] -= 1
                    next_idx += 1

        # 4. Everyone else, in random order, onto the smallest team
        remaining = [p for p in active if p.id not in assigned]
        self.rng.shuffle(remaining)
        for player in remaining:
            place(player, least_populated_index(teams))

        # 5. Final positions and skill totals
        for team in teams:
            self.position_service.assign(team, quotas)
            team.recalculate_skill()

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Initial placement ({strategy.value}): "
                + ", ".join(f"{t.name}={len(t.players)}p/{t.total_skill}" for t in teams)
            )
        return teams
