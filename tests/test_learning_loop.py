"""Unit tests for learning weights and the outcome feedback loop.

Tests LearningWeights clamping and persistence, and LearningFeedbackLoop
factor nudges, malformed-outcome handling and taxonomy pair promotion.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from skillmatch.models.feedback import Assignment, AssignmentOutcome
from skillmatch.models.skill import ContactSkill, SkillRequirement
from skillmatch.policy.resolver import PolicyResolver
from skillmatch.skills.calculator import MatchCalculator
from skillmatch.skills.learning import LearningFeedbackLoop, LearningWeights
from skillmatch.skills.taxonomy import SkillTaxonomy

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"
NOW = datetime(2026, 6, 15, tzinfo=timezone.utc)


@pytest.fixture
def resolver():
    return PolicyResolver.from_config_dir(CONFIG_DIR)


@pytest.fixture
def taxonomy():
    return SkillTaxonomy.from_config_dir(CONFIG_DIR)


@pytest.fixture
def weights(resolver, taxonomy):
    return LearningWeights.from_policy(resolver, key_fn=taxonomy.canonical_key)


@pytest.fixture
def loop(taxonomy, weights, resolver):
    return LearningFeedbackLoop(taxonomy, weights, resolver)


def _history(outcomes, required=("SQL",), used=("Agile", "SQL"), performance=90.0):
    """Build (assignments, outcomes) from a list of success flags."""
    assignments = []
    results = []
    for i, success in enumerate(outcomes):
        assignment_id = f"as-{i}"
        assignments.append(Assignment(
            assignment_id=assignment_id,
            candidate_id=f"c-{i}",
            task_id=f"t-{i}",
            required_skills=tuple(SkillRequirement(name) for name in required),
        ))
        results.append(AssignmentOutcome(
            assignment_id=assignment_id,
            success=success,
            performance_score=performance,
            skills_used=used,
        ))
    return assignments, results


# ===================================================================
# LearningWeights
# ===================================================================

class TestLearningWeights:
    def test_default_factor(self, weights) -> None:
        assert weights.factor("SQL") == 1.0
        assert len(weights) == 0

    def test_adjust_clamped(self, weights) -> None:
        change = weights.adjust("SQL", 0.8)
        assert change.new_factor == 1.5
        assert weights.adjust("sql", -2.0).new_factor == 0.5

    def test_alias_shares_factor(self, weights) -> None:
        weights.adjust("K8s", 0.2)
        assert weights.factor("Kubernetes") == pytest.approx(1.2)

    def test_export_import_round_trip(self, weights, taxonomy) -> None:
        weights.adjust("SQL", 0.3)
        saved = weights.export()
        fresh = LearningWeights(key_fn=taxonomy.canonical_key)
        fresh.import_weights(saved)
        assert fresh.factor("SQL") == pytest.approx(1.3)

    def test_import_clamps(self, weights) -> None:
        weights.import_weights({"SQL": 9.0, "Python": 0.1})
        assert weights.factor("SQL") == 1.5
        assert weights.factor("Python") == 0.5

    def test_import_replaces(self, weights) -> None:
        weights.adjust("SQL", 0.3)
        weights.import_weights({"Python": 1.1})
        assert weights.factor("SQL") == 1.0

    @pytest.mark.parametrize("bad", ["high", None, True])
    def test_import_rejects_non_numbers(self, weights, bad) -> None:
        with pytest.raises(ValueError, match="must be a number"):
            weights.import_weights({"SQL": bad})

    def test_inverted_bounds_rejected(self) -> None:
        with pytest.raises(ValueError):
            LearningWeights(min_factor=2.0, max_factor=1.0)

    def test_no_notification_when_unchanged(self, weights) -> None:
        calls = []
        weights.adjust("SQL", 0.5)
        weights.add_listener(lambda: calls.append(1))
        weights.adjust("SQL", 0.5)
        assert calls == []


# ===================================================================
# Factor adjustments
# ===================================================================

class TestFactorNudges:
    def test_success_raises_factor(self, loop, weights) -> None:
        update = loop.improve_matching(*_history([True], performance=100))
        assert weights.factor("SQL") == pytest.approx(1.1)
        assert update.processed == 1
        assert update.adjustments[0].delta == pytest.approx(0.1)

    def test_failure_lowers_factor(self, loop, weights) -> None:
        loop.improve_matching(*_history([False], performance=100))
        assert weights.factor("SQL") == pytest.approx(0.95)

    def test_scaled_by_performance(self, loop, weights) -> None:
        loop.improve_matching(*_history([True], performance=50))
        assert weights.factor("SQL") == pytest.approx(1.05)

    def test_every_required_skill_adjusted(self, loop, weights) -> None:
        loop.improve_matching(*_history([True], required=("SQL", "Python"), performance=100))
        assert weights.factor("SQL") == pytest.approx(1.1)
        assert weights.factor("Python") == pytest.approx(1.1)

    def test_factor_stays_bounded(self, loop, weights) -> None:
        loop.improve_matching(*_history([True] * 20, performance=100))
        assert weights.factor("SQL") == 1.5

    def test_assignment_without_outcome_ignored(self, loop, weights) -> None:
        assignments, outcomes = _history([True, True])
        update = loop.improve_matching(assignments, outcomes[:1])
        assert update.processed == 1
        assert update.skipped == 0

    def test_malformed_outcomes_skipped(self, loop, weights) -> None:
        assignments, outcomes = _history([True, True], performance=100)
        outcomes[0] = AssignmentOutcome(assignments[0].assignment_id, True, skills_used=["SQL"])
        update = loop.improve_matching(assignments, outcomes)
        assert update.skipped == 1
        assert update.processed == 1
        assert weights.factor("SQL") == pytest.approx(1.1)

    def test_empty_history(self, loop) -> None:
        update = loop.improve_matching([], [])
        assert update.processed == 0
        assert update.adjustments == []
        assert update.promoted_pairs == []

    def test_changes_reach_matching(self, taxonomy, weights, loop, resolver) -> None:
        calculator = MatchCalculator(taxonomy, weights, resolver=resolver)
        reqs = [SkillRequirement("SQL", weight=10)]
        skills = [ContactSkill("SQL")]
        before = calculator.calculate_match(reqs, skills, now=NOW)
        loop.improve_matching(*_history([False] * 10, performance=100))
        assert len(calculator.cache) == 0
        after = calculator.calculate_match(reqs, skills, now=NOW)
        assert after.breakdown.skill_match < before.breakdown.skill_match


# ===================================================================
# Pair promotion
# ===================================================================

class TestPairPromotion:
    def test_six_successes_promote_pair(self, loop, taxonomy) -> None:
        update = loop.improve_matching(*_history([True] * 6))
        assert update.promoted_pairs == [("Agile", "SQL")]
        assert "SQL" in taxonomy.related_skills("Agile")

    def test_five_observations_not_enough(self, loop, taxonomy) -> None:
        update = loop.improve_matching(*_history([True] * 5))
        assert update.promoted_pairs == []
        assert "SQL" not in taxonomy.related_skills("Agile")

    def test_rate_above_threshold_promotes(self, loop) -> None:
        update = loop.improve_matching(*_history([True] * 5 + [False]))
        assert update.promoted_pairs == [("Agile", "SQL")]

    def test_rate_below_threshold_does_not_promote(self, loop) -> None:
        update = loop.improve_matching(*_history([True] * 5 + [False] * 2))
        assert update.promoted_pairs == []

    def test_statistics_accumulate_across_calls(self, loop) -> None:
        loop.improve_matching(*_history([True] * 3))
        update = loop.improve_matching(*_history([True] * 3))
        assert update.promoted_pairs == [("Agile", "SQL")]
        assert loop.pair_success_rates()[("agile", "sql")].total == 6

    def test_promotion_is_idempotent(self, loop, taxonomy) -> None:
        loop.improve_matching(*_history([True] * 6))
        update = loop.improve_matching(*_history([True]))
        assert update.promoted_pairs == []
        assert taxonomy.related_skills("Agile").count("SQL") == 1

    def test_unknown_skill_gets_entry(self, loop, taxonomy) -> None:
        loop.improve_matching(*_history([True] * 6, used=("Terraform", "AWS")))
        assert "Terraform" in taxonomy.related_skills("AWS")

    def test_skill_success_rates(self, loop) -> None:
        loop.improve_matching(*_history([True, False]))
        stats = loop.skill_success_rates()["sql"]
        assert stats.total == 2
        assert stats.rate == 0.5
