"""
Team scoring domain service.

Computes the "badness" of a candidate assignment and validates a final one.
"""

import itertools
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from config import SCORING_WEIGHTS, SIMILARITY_POLICY
from domain.models.constraint import ConstraintType, TeamConstraint
from domain.models.player import (
    NO_POSITION,
    PRIMARY_PRIORITY,
    SECONDARY_PRIORITY,
    TERTIARY_PRIORITY,
)
from domain.models.team import HASH_ID_SEPARATOR, HASH_TEAM_SEPARATOR, Team
from domain.services.position_assignment_service import numeric_quotas

# Tiebreaker cost per player by the preference level of the position held
PREFERENCE_COSTS = {SECONDARY_PRIORITY: 0.002, TERTIARY_PRIORITY: 0.004}
UNRANKED_PREFERENCE_COST = 0.01


class SimilarityPolicy(str, Enum):
    """How overlap with several previous runs is folded into one ratio."""

    MAX = "max"  # Highest overlap against any single previous run
    UNION = "union"  # Overlap against all previous pairs pooled together
    MEAN = "mean"  # Average overlap across previous runs


@dataclass
class ScoringWeights:
    """Penalty weights. Defaults come from config.SCORING_WEIGHTS."""

    size: float = field(default_factory=lambda: SCORING_WEIGHTS["size"])
    constraint: float = field(default_factory=lambda: SCORING_WEIGHTS["constraint"])
    quota: float = field(default_factory=lambda: SCORING_WEIGHTS["quota"])
    similarity: float = field(default_factory=lambda: SCORING_WEIGHTS["similarity"])
    skill: float = field(default_factory=lambda: SCORING_WEIGHTS["skill"])
    preference: float = field(default_factory=lambda: SCORING_WEIGHTS["preference"])


@dataclass
class ScoreBreakdown:
    """Weighted components of a score, useful for logging and tests."""

    size_penalty: float = 0.0
    constraint_penalty: float = 0.0
    quota_penalty: float = 0.0
    similarity_penalty: float = 0.0
    skill_penalty: float = 0.0
    preference_penalty: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.size_penalty
            + self.constraint_penalty
            + self.quota_penalty
            + self.similarity_penalty
            + self.skill_penalty
            + self.preference_penalty
        )


@dataclass
class QuotaViolation:
    team_id: int
    position: str
    count: int
    quota: int


def skill_standard_deviation(teams: Sequence[Team]) -> float:
    """Population standard deviation of team total_skill (0 for no teams)."""
    if not teams:
        return 0.0
    skills = [t.total_skill for t in teams]
    mean = sum(skills) / len(skills)
    variance = sum((s - mean) ** 2 for s in skills) / len(skills)
    return math.sqrt(variance)


def max_skill_gap(teams: Sequence[Team]) -> float:
    """Strongest minus weakest team total_skill (0 for no teams)."""
    if not teams:
        return 0.0
    skills = [t.total_skill for t in teams]
    return max(skills) - min(skills)


def _pairs_of(ids: Iterable[str]) -> set[tuple[str, str]]:
    return {tuple(sorted(pair)) for pair in itertools.combinations(ids, 2)}


def team_pairs(teams: Sequence[Team]) -> set[tuple[str, str]]:
    """All same-team player id pairs of an assignment."""
    pairs: set[tuple[str, str]] = set()
    for team in teams:
        pairs |= _pairs_of(p.id for p in team.players)
    return pairs


def pairs_from_hash(partition: str) -> set[tuple[str, str]]:
    """
    Same-team pairs encoded in a partition hash.

    Teams are separated by "|" and ids by ","; a hash without "|" is read
    as a single team.
    """
    pairs: set[tuple[str, str]] = set()
    for team_key in partition.split(HASH_TEAM_SEPARATOR):
        ids = [pid for pid in team_key.split(HASH_ID_SEPARATOR) if pid]
        pairs |= _pairs_of(ids)
    return pairs


def calculate_pair_similarity(
    teams: Sequence[Team],
    previous_hashes: Sequence[str] | None,
    policy: SimilarityPolicy = SimilarityPolicy.MAX,
) -> float:
    """
    Fraction of the assignment's same-team pairs already seen in previous runs.

    Returns:
        Ratio in [0, 1]; 0 with no history or no pairs
    """
    if not previous_hashes:
        return 0.0
    current = team_pairs(teams)
    if not current:
        return 0.0

    previous = [pairs_from_hash(h) for h in previous_hashes]
    if policy == SimilarityPolicy.UNION:
        pooled = set().union(*previous)
        return len(current & pooled) / len(current)

    ratios = [len(current & prev) / len(current) for prev in previous]
    if policy == SimilarityPolicy.MEAN:
        return sum(ratios) / len(ratios)
    return max(ratios)


def _team_index_by_player(teams: Sequence[Team]) -> dict[str, int]:
    return {p.id: idx for idx, team in enumerate(teams) for p in team.players}


def is_constraint_violated(constraint: TeamConstraint, team_index: Mapping[str, int]) -> bool:
    """
    Check one constraint against a player-id -> team-index map.

    Ids that resolve to no team (inactive or unknown players) are ignored.
    """
    indices = [team_index[pid] for pid in constraint.player_ids if pid in team_index]
    if constraint.type == ConstraintType.MATCH:
        return len(set(indices)) > 1
    if constraint.type == ConstraintType.SPLIT:
        return len(set(indices)) < len(indices)
    return False


def find_constraint_violations(
    teams: Sequence[Team], constraints: Iterable[TeamConstraint] | None
) -> list[TeamConstraint]:
    """Constraints the assignment breaks, in input order."""
    team_index = _team_index_by_player(teams)
    return [c for c in constraints or () if is_constraint_violated(c, team_index)]


def find_quota_violations(
    teams: Sequence[Team], quotas: Mapping[str, int | None] | None
) -> list[QuotaViolation]:
    """Every (team, position) pair whose assigned count differs from its quota."""
    violations = []
    for position, quota in numeric_quotas(quotas):
        for team in teams:
            count = team.count_position(position)
            if count != quota:
                violations.append(QuotaViolation(team.id, position, count, quota))
    return violations


class TeamScoringService:
    """
    Pure domain service for assignment scoring.

    Lower is better. The weights are meant to dominate in strict order:
    team-size balance, constraints and quotas (near-mandatory), pairing
    diversity, then skill balance as the fine-grained tiebreaker, then
    position preference.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        similarity_policy: SimilarityPolicy | str | None = None,
        ignore_tier: bool = False,
    ):
        """
        Initialize the scoring service.

        Args:
            weights: Penalty weights (defaults from config)
            similarity_policy: Aggregation across previous runs (default from config)
            ignore_tier: Drop the skill standard deviation term entirely
        """
        self.weights = weights if weights is not None else ScoringWeights()
        self.similarity_policy = SimilarityPolicy(
            similarity_policy if similarity_policy is not None else SIMILARITY_POLICY
        )
        self.ignore_tier = ignore_tier

    def breakdown(
        self,
        teams: Sequence[Team],
        constraints: Iterable[TeamConstraint] | None = None,
        quotas: Mapping[str, int | None] | None = None,
        previous_hashes: Sequence[str] | None = None,
    ) -> ScoreBreakdown:
        result = ScoreBreakdown()
        if not teams:
            return result

        sizes = [len(t.players) for t in teams]
        mean_size = sum(sizes) / len(sizes)
        result.size_penalty = sum(abs(s - mean_size) for s in sizes) * self.weights.size

        violations = find_constraint_violations(teams, constraints)
        result.constraint_penalty = len(violations) * self.weights.constraint

        quota_gap = sum(abs(v.count - v.quota) for v in find_quota_violations(teams, quotas))
        result.quota_penalty = quota_gap * self.weights.quota

        similarity = calculate_pair_similarity(teams, previous_hashes, self.similarity_policy)
        result.similarity_penalty = similarity * self.weights.similarity

        if not self.ignore_tier:
            result.skill_penalty = skill_standard_deviation(teams) * self.weights.skill

        result.preference_penalty = self._preference_cost(teams) * self.weights.preference
        return result

    def evaluate(
        self,
        teams: Sequence[Team],
        constraints: Iterable[TeamConstraint] | None = None,
        quotas: Mapping[str, int | None] | None = None,
        previous_hashes: Sequence[str] | None = None,
    ) -> float:
        """
        Score an assignment (lower is better).

        Args:
            teams: Candidate assignment
            constraints: MATCH/SPLIT constraints
            quotas: Per-team position quotas
            previous_hashes: Partition hashes of earlier runs

        Returns:
            Weighted penalty sum
        """
        return self.breakdown(teams, constraints, quotas, previous_hashes).total

    def _preference_cost(self, teams: Sequence[Team]) -> float:
        cost = 0.0
        for team in teams:
            for player in team.players:
                position = player.assigned_position
                if position is None or position == NO_POSITION:
                    continue
                priority = player.position_priority(position)
                if priority == PRIMARY_PRIORITY:
                    continue
                cost += PREFERENCE_COSTS.get(priority, UNRANKED_PREFERENCE_COST)
        return cost
