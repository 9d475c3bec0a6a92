"""
Constraint analysis domain service.

Splits the constraint list into MATCH and SPLIT groups.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from domain.models.constraint import ConstraintType, TeamConstraint


@dataclass
class ConstraintGroups:
    """Player id groups partitioned by constraint type."""

    match_groups: list[list[str]] = field(default_factory=list)
    split_groups: list[list[str]] = field(default_factory=list)


def analyze_constraint_groups(constraints: Iterable[TeamConstraint] | None) -> ConstraintGroups:
    """
    Partition constraints into MATCH and SPLIT id groups.

    No validation is done: empty groups are kept (consumers skip groups with
    no resolvable players) and constraints of an unknown type are ignored.

    Args:
        constraints: Constraints in caller order

    Returns:
        ConstraintGroups with copies of each constraint's id list
    """
    groups = ConstraintGroups()
    for constraint in constraints or ():
        if constraint.type == ConstraintType.MATCH:
            groups.match_groups.append(list(constraint.player_ids))
        elif constraint.type == ConstraintType.SPLIT:
            groups.split_groups.append(list(constraint.player_ids))
    return groups

