"""
Position assignment domain service.

Fills each team's quota'd positions with the members who prefer them most.
"""

import logging
from collections import Counter
from collections.abc import Mapping

from domain.models.player import (
    PRIMARY_PRIORITY,
    SECONDARY_PRIORITY,
    TERTIARY_PRIORITY,
    UNRANKED_PRIORITY,
    Player,
)
from domain.models.team import Team
from utils.position_assignment_cache import get_cached_position_plan

logger = logging.getLogger("team_balancer.positions")


def numeric_quotas(quotas: Mapping[str, int | None] | None) -> list[tuple[str, int]]:
    """
    Quota items with a fixed count, in map order.

    None marks a position as unconstrained and is skipped. Integral floats
    (1.0, as JSON often delivers) count as integers; any other value is
    skipped and logged.
    """
    if not quotas:
        return []
    items = []
    for position, count in quotas.items():
        if isinstance(count, float) and count.is_integer():
            count = int(count)
        if isinstance(count, int) and not isinstance(count, bool):
            items.append((position, count))
        elif count is not None:
            logger.debug(f"Ignoring non-integer quota {count!r} for position {position}")
    return items


def _priority_from_key(preference_key: tuple[tuple[str, ...], ...], position: str) -> int:
    primary, secondary, tertiary = preference_key
    if position in primary:
        return PRIMARY_PRIORITY
    if position in secondary:
        return SECONDARY_PRIORITY
    if position in tertiary:
        return TERTIARY_PRIORITY
    return UNRANKED_PRIORITY


def compute_position_plan(
    preference_keys: tuple[tuple[tuple[str, ...], ...], ...],
    quota_key: tuple[tuple[str, int], ...],
) -> tuple[str | None, ...]:
    """
    Greedy quota claim over a team's members.

    For each position, one slot at a time, the unclaimed member with the best
    priority wins; the first member encountered wins a tie. Members who do not
    list the position at all are never claimed for it, so a slot with no
    eligible member stays empty.

    This is a pure computation. For performance-critical code paths, callers
    should go through utils/position_assignment_cache.py.

    Returns:
        Claimed position per member (team order), None if unclaimed
    """
    plan: list[str | None] = [None] * len(preference_keys)
    for position, count in quota_key:
        for _ in range(count):
            best_index = None
            best_priority = UNRANKED_PRIORITY
            for index, key in enumerate(preference_keys):
                if plan[index] is not None:
                    continue
                priority = _priority_from_key(key, position)
                if priority < best_priority:
                    best_priority = priority
                    best_index = index
            if best_index is None:
                break
            plan[best_index] = position
    return tuple(plan)


class PositionAssignmentService:
    """
    Pure domain service for position assignment logic.

    Responsibilities:
    - Claim quota'd positions for a team's members
    - Give unclaimed members their default position
    - Count off-position players
    """

    def assign(self, team: Team, quotas: Mapping[str, int | None] | None) -> None:
        """
        Assign every member of the team a position, in place.

        Recomputing team.total_skill afterwards is the caller's job.

        Args:
            team: Team whose members are (re)assigned
            quotas: Position quota map; None or empty means primary preferences only
        """
        self.assign_players(team.players, quotas)

    def assign_players(self, players: list[Player], quotas: Mapping[str, int | None] | None) -> None:
        quota_key = tuple(numeric_quotas(quotas))
        if not quota_key:
            for player in players:
                player.assigned_position = player.default_position()
            return

        preference_keys = tuple(p.preference_key() for p in players)
        plan = get_cached_position_plan(preference_keys, quota_key)
        for player, claimed in zip(players, plan):
            player.assigned_position = claimed if claimed is not None else player.default_position()

    def claimed_counts(self, players: list[Player], quotas: Mapping[str, int | None] | None) -> Counter:
        """
        Count the quota slots the given members would fill, per position.

        Uses the same claim plan as assign_players without touching the players.
        """
        quota_key = tuple(numeric_quotas(quotas))
        if not quota_key or not players:
            return Counter()
        plan = get_cached_position_plan(tuple(p.preference_key() for p in players), quota_key)
        return Counter(position for position in plan if position is not None)

    def count_off_position(self, players: list[Player]) -> int:
        """Count players holding a position that is not one of their primaries."""
        return sum(1 for p in players if p.position_priority(p.assigned_position) != PRIMARY_PRIORITY)

    def get_position_coverage(
        self, players: list[Player], positions: list[str]
    ) -> dict[str, list[Player]]:
        """
        Get which players can fill each position.

        Args:
            players: List of players
            positions: Position tags to report on

        Returns:
            Dictionary mapping position to players listing it at any level
        """
        return {position: [p for p in players if p.can_play(position)] for position in positions}
