"""
Domain services containing pure business logic.
"""

from domain.services.constraint_analysis_service import ConstraintGroups, analyze_constraint_groups
from domain.services.initial_placement_service import InitialPlacementBuilder, PlacementStrategy
from domain.services.position_assignment_service import PositionAssignmentService
from domain.services.swap_service import can_swap, swap_players
from domain.services.team_scoring_service import SimilarityPolicy, TeamScoringService

__all__ = [
    "ConstraintGroups",
    "InitialPlacementBuilder",
    "PlacementStrategy",
    "PositionAssignmentService",
    "SimilarityPolicy",
    "TeamScoringService",
    "analyze_constraint_groups",
    "can_swap",
    "swap_players",
]
