"""
Tests for assignment scoring and validation helpers.
"""

import pytest

from domain.models.constraint import ConstraintType, TeamConstraint
from domain.models.team import Team
from domain.services.team_scoring_service import (
    ScoringWeights,
    SimilarityPolicy,
    TeamScoringService,
    calculate_pair_similarity,
    find_constraint_violations,
    find_quota_violations,
    max_skill_gap,
    pairs_from_hash,
    skill_standard_deviation,
)
from tests.conftest import make_player


WEIGHTS = ScoringWeights(
    size=100_000_000.0,
    constraint=100_000_000.0,
    quota=100_000_000.0,
    similarity=10_000_000.0,
    skill=1.0,
    preference=1.0,
)


def build_team(team_id, members):
    """members: (id, tier) or (id, tier, position) tuples; position defaults to a primary "X"."""
    players = []
    for member in members:
        position = member[2] if len(member) > 2 else "X"
        player = make_player(member[0], member[1], primary=[position])
        player.assigned_position = position
        players.append(player)
    team = Team(team_id, players=players)
    team.recalculate_skill()
    return team


@pytest.fixture
def scorer():
    return TeamScoringService(weights=WEIGHTS, similarity_policy=SimilarityPolicy.MAX)


@pytest.fixture
def two_pairs():
    """Team A = {a, b} (skill 10), Team B = {c, d} (skill 6)."""
    return [
        build_team(1, [("a", 5), ("b", 5)]),
        build_team(2, [("c", 3), ("d", 3)]),
    ]


class TestSkillStatistics:
    """Tests for standard deviation and max gap."""

    def test_population_standard_deviation(self, two_pairs):
        assert skill_standard_deviation(two_pairs) == pytest.approx(2.0)
        assert max_skill_gap(two_pairs) == pytest.approx(4.0)

    def test_no_teams(self):
        assert skill_standard_deviation([]) == 0.0
        assert max_skill_gap([]) == 0.0


class TestEvaluate:
    """Tests for TeamScoringService.evaluate."""

    def test_empty_assignment_scores_zero(self, scorer):
        assert scorer.evaluate([]) == 0.0

    def test_balanced_assignment_scores_skill_only(self, scorer, two_pairs):
        assert scorer.evaluate(two_pairs) == pytest.approx(2.0)

    def test_size_imbalance(self, scorer):
        teams = [build_team(1, [("a", 1), ("b", 1), ("c", 1)]), build_team(2, [("d", 3)])]
        breakdown = scorer.breakdown(teams)
        assert breakdown.size_penalty == pytest.approx(2 * WEIGHTS.size)
        assert breakdown.skill_penalty == pytest.approx(0.0)

    def test_match_violation(self, scorer, two_pairs):
        constraints = [TeamConstraint(ConstraintType.MATCH, ["a", "c"])]
        assert scorer.breakdown(two_pairs, constraints).constraint_penalty == WEIGHTS.constraint

    def test_split_violation(self, scorer, two_pairs):
        constraints = [
            TeamConstraint(ConstraintType.SPLIT, ["a", "b"]),
            TeamConstraint(ConstraintType.SPLIT, ["a", "c"]),
        ]
        assert scorer.breakdown(two_pairs, constraints).constraint_penalty == WEIGHTS.constraint

    def test_quota_penalty_sums_absolute_gaps(self, scorer):
        teams = [
            build_team(1, [("a", 3, "GK"), ("b", 3, "GK")]),
            build_team(2, [("c", 3, "FW"), ("d", 3, "FW")]),
        ]
        # Team A has 2 GK (gap 1), Team B has 0 GK (gap 1)
        assert scorer.breakdown(teams, quotas={"GK": 1}).quota_penalty == pytest.approx(2 * WEIGHTS.quota)

    def test_null_quota_ignored(self, scorer, two_pairs):
        assert scorer.breakdown(two_pairs, quotas={"GK": None}).quota_penalty == 0.0

    def test_repeated_pairs_penalized(self, scorer, two_pairs):
        breakdown = scorer.breakdown(two_pairs, previous_hashes=["a,b|c,d"])
        assert breakdown.similarity_penalty == pytest.approx(WEIGHTS.similarity)

    def test_ignore_tier_drops_skill_term(self, two_pairs):
        scorer = TeamScoringService(weights=WEIGHTS, ignore_tier=True)
        assert scorer.evaluate(two_pairs) == 0.0

    def test_preference_tiebreaker(self, scorer):
        secondary = make_player("a", 3, primary=["FW"], secondary=["MF"])
        secondary.assigned_position = "MF"
        tertiary = make_player("b", 3, primary=["FW"], tertiary=["MF"])
        tertiary.assigned_position = "MF"
        unranked = make_player("c", 3, primary=["FW"])
        unranked.assigned_position = "GK"
        team = Team(1, players=[secondary, tertiary, unranked])
        assert scorer.breakdown([team]).preference_penalty == pytest.approx(0.002 + 0.004 + 0.01)

    def test_breakdown_total_matches_evaluate(self, scorer, two_pairs):
        constraints = [TeamConstraint(ConstraintType.MATCH, ["a", "d"])]
        args = (two_pairs, constraints, {"GK": 1}, ["a,c|b,d"])
        assert scorer.breakdown(*args).total == pytest.approx(scorer.evaluate(*args))

    def test_idempotent(self, scorer, two_pairs):
        """Scoring does not mutate teams or players."""
        constraints = [TeamConstraint(ConstraintType.SPLIT, ["a", "b"])]
        first = scorer.evaluate(two_pairs, constraints, {"GK": 1}, ["a,b|c,d"])
        second = scorer.evaluate(two_pairs, constraints, {"GK": 1}, ["a,b|c,d"])
        assert first == second
        assert [p.assigned_position for t in two_pairs for p in t.players] == ["X"] * 4


class TestPairSimilarity:
    """Tests for history overlap."""

    HISTORY = ["a,b|c|d", "c,d|a|b", "a,c|b,d"]

    def test_no_history(self, two_pairs):
        assert calculate_pair_similarity(two_pairs, []) == 0.0
        assert calculate_pair_similarity(two_pairs, None) == 0.0

    def test_single_player_teams_have_no_pairs(self):
        teams = [build_team(1, [("a", 1)]), build_team(2, [("b", 1)])]
        assert calculate_pair_similarity(teams, ["a,b"]) == 0.0

    @pytest.mark.parametrize(
        "policy,expected",
        [
            (SimilarityPolicy.MAX, 0.5),
            (SimilarityPolicy.UNION, 1.0),
            (SimilarityPolicy.MEAN, 1 / 3),
        ],
    )
    def test_policies(self, two_pairs, policy, expected):
        assert calculate_pair_similarity(two_pairs, self.HISTORY, policy) == pytest.approx(expected)

    def test_hash_without_separator_is_one_team(self, two_pairs):
        assert pairs_from_hash("a,b,c") == {("a", "b"), ("a", "c"), ("b", "c")}
        assert calculate_pair_similarity(two_pairs, ["a,b,c,d"]) == 1.0

    def test_policy_accepts_string(self):
        assert TeamScoringService(similarity_policy="union").similarity_policy == SimilarityPolicy.UNION


class TestViolationFinders:
    """Tests for the post-optimization validators."""

    def test_unknown_ids_ignored(self, two_pairs):
        constraints = [
            TeamConstraint(ConstraintType.MATCH, ["a", "ghost"]),
            TeamConstraint(ConstraintType.SPLIT, ["a", "ghost"]),
        ]
        assert find_constraint_violations(two_pairs, constraints) == []

    def test_violations_in_input_order(self, two_pairs):
        first = TeamConstraint(ConstraintType.SPLIT, ["c", "d"])
        second = TeamConstraint(ConstraintType.MATCH, ["b", "d"])
        assert find_constraint_violations(two_pairs, [first, second]) == [first, second]

    def test_quota_violations_report_counts(self):
        teams = [
            build_team(1, [("a", 3, "GK"), ("b", 3, "FW")]),
            build_team(2, [("c", 3, "FW"), ("d", 3, "FW")]),
        ]
        violations = find_quota_violations(teams, {"GK": 1, "FW": None})
        assert len(violations) == 1
        assert (violations[0].team_id, violations[0].position, violations[0].count, violations[0].quota) == (2, "GK", 0, 1)

    def test_integral_float_quota_checked(self):
        teams = [
            build_team(1, [("a", 3, "GK"), ("b", 3, "FW")]),
            build_team(2, [("c", 3, "FW"), ("d", 3, "FW")]),
        ]
        violations = find_quota_violations(teams, {"GK": 1.0})
        assert [(v.team_id, v.quota) for v in violations] == [(2, 1)]
