"""
Swap move domain service.

The optimizer's neighborhood: exchange one player between two teams.
can_swap() is a cheap pre-filter; the scoring service stays the
authoritative judge of constraint and quota correctness.
"""

from collections.abc import Iterable, Mapping

from domain.models.constraint import ConstraintType, TeamConstraint
from domain.models.player import Player
from domain.models.team import Team
from domain.services.position_assignment_service import (
    PositionAssignmentService,
    numeric_quotas,
)


def _breaks_quota(
    team: Team,
    leaving: Player,
    arriving_position: str | None,
    quota_items: dict[str, int],
) -> bool:
    """Would exchanging `leaving` for a player at arriving_position break an exact quota match?"""
    for position in {leaving.assigned_position, arriving_position}:
        if position not in quota_items:
            continue
        quota = quota_items[position]
        before = team.count_position(position)
        after = before - (leaving.assigned_position == position) + (arriving_position == position)
        if before == quota and after != quota:
            return True
    return False


def _match_blocks_move(
    mover: Player,
    exchanged: Player,
    team_of: Mapping[str, int],
    constraint: TeamConstraint,
    destination_idx: int,
) -> bool:
    partners = [
        pid
        for pid in constraint.partners_of(mover.id)
        if pid != exchanged.id and pid in team_of
    ]
    if not partners:
        return False
    return not any(team_of[pid] == destination_idx for pid in partners)


def _split_blocks_move(
    mover: Player,
    destination: Team,
    exchanged: Player,
    constraint: TeamConstraint,
) -> bool:
    partners = set(constraint.partners_of(mover.id))
    partners.discard(exchanged.id)
    return any(p.id in partners for p in destination.players)


def can_swap(
    player_a: Player,
    team_a_idx: int,
    player_b: Player,
    team_b_idx: int,
    teams: list[Team],
    constraints: Iterable[TeamConstraint] | None,
    quotas: Mapping[str, int | None] | None = None,
    strict_quotas: bool = True,
) -> bool:
    """
    Check whether exchanging player_a (on team_a) with player_b (on team_b) is worth scoring.

    Rejects swaps that would:
    - move a MATCH member away from all of its partners
    - put a player on a team holding one of its SPLIT partners
    - (strict quotas) turn an exact quota match into a mismatch

    Args:
        player_a: Player currently on teams[team_a_idx]
        team_a_idx: Index of player_a's team
        player_b: Player currently on teams[team_b_idx]
        team_b_idx: Index of player_b's team
        teams: Current assignment
        constraints: MATCH/SPLIT constraints
        quotas: Per-team position quotas
        strict_quotas: Whether exact quota matches must be preserved

    Returns:
        True if the swap passes every check
    """
    team_a = teams[team_a_idx]
    team_b = teams[team_b_idx]

    quota_items = dict(numeric_quotas(quotas))
    if strict_quotas and quota_items and player_a.assigned_position != player_b.assigned_position:
        if _breaks_quota(team_a, player_a, player_b.assigned_position, quota_items):
            return False
        if _breaks_quota(team_b, player_b, player_a.assigned_position, quota_items):
            return False

    team_of: dict[str, int] | None = None
    for constraint in constraints or ():
        a_involved = constraint.involves(player_a.id)
        b_involved = constraint.involves(player_b.id)
        if not (a_involved or b_involved):
            continue

        if constraint.type == ConstraintType.MATCH:
            if team_of is None:
                team_of = {p.id: idx for idx, t in enumerate(teams) for p in t.players}
            if a_involved and _match_blocks_move(player_a, player_b, team_of, constraint, team_b_idx):
                return False
            if b_involved and _match_blocks_move(player_b, player_a, team_of, constraint, team_a_idx):
                return False
        elif constraint.type == ConstraintType.SPLIT:
            if a_involved and _split_blocks_move(player_a, team_b, player_b, constraint):
                return False
            if b_involved and _split_blocks_move(player_b, team_a, player_a, constraint):
                return False

    return True


def swap_players(
    teams: list[Team],
    player_a: Player,
    team_a_idx: int,
    player_b: Player,
    team_b_idx: int,
    quotas: Mapping[str, int | None] | None = None,
    position_service: PositionAssignmentService | None = None,
) -> list[Team]:
    """
    Build the candidate assignment with player_a and player_b exchanged.

    Copy-on-write: the two affected teams are deep-cloned, every other team
    object is shared with the input, and the input list is left untouched.
    Team objects in an assignment are never mutated once built, so sharing
    the unaffected ones is safe.

    Returns:
        New assignment list with positions reassigned (when quotas are active)
        and total_skill recomputed for both affected teams
    """
    new_teams = list(teams)
    new_a = teams[team_a_idx].clone()
    new_b = teams[team_b_idx].clone()

    moving_a = next(p for p in new_a.players if p.id == player_a.id)
    moving_b = next(p for p in new_b.players if p.id == player_b.id)
    new_a.players = [p for p in new_a.players if p.id != player_a.id] + [moving_b]
    new_b.players = [p for p in new_b.players if p.id != player_b.id] + [moving_a]

    if numeric_quotas(quotas):
        service = position_service or PositionAssignmentService()
        service.assign(new_a, quotas)
        service.assign(new_b, quotas)

    new_a.recalculate_skill()
    new_b.recalculate_skill()
    new_teams[team_a_idx] = new_a
    new_teams[team_b_idx] = new_b
    return new_teams
