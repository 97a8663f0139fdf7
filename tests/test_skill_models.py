"""Unit tests for skill data models — levels, requirements, options, results.

Tests construction-time validation and the small helpers on the models;
scoring behaviour is covered by test_match_calculator.py.
"""

import dataclasses
from datetime import date

import pytest

from skillmatch.models.feedback import AssignmentOutcome, FactorAdjustment, SuccessStats
from skillmatch.models.gap import ContactMatch, GapAnalysis, GapInfo, GapType
from skillmatch.models.match import MatchResult, ScoreBreakdown
from skillmatch.models.skill import (
    Candidate,
    ContactSkill,
    MatchOptions,
    ProficiencyLevel,
    SkillRelationship,
    SkillRequirement,
)


class TestProficiencyLevel:
    def test_ordering(self) -> None:
        assert ProficiencyLevel.BEGINNER < ProficiencyLevel.INTERMEDIATE
        assert ProficiencyLevel.INTERMEDIATE < ProficiencyLevel.ADVANCED
        assert ProficiencyLevel.ADVANCED < ProficiencyLevel.EXPERT

    def test_ordinals(self) -> None:
        assert [int(level) for level in ProficiencyLevel] == [1, 2, 3, 4]

    def test_label(self) -> None:
        assert ProficiencyLevel.ADVANCED.label == "advanced"

    def test_parse_name_case_insensitive(self) -> None:
        assert ProficiencyLevel.parse(" Expert ") is ProficiencyLevel.EXPERT

    def test_parse_int(self) -> None:
        assert ProficiencyLevel.parse(2) is ProficiencyLevel.INTERMEDIATE

    def test_parse_unknown_name_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown proficiency level"):
            ProficiencyLevel.parse("guru")

    def test_parse_out_of_range_int_raises(self) -> None:
        with pytest.raises(ValueError):
            ProficiencyLevel.parse(7)


class TestSkillRequirement:
    def test_defaults(self) -> None:
        req = SkillRequirement("Python")
        assert req.required_level == ProficiencyLevel.INTERMEDIATE
        assert req.weight == 1.0
        assert req.is_required is True
        assert req.alternative_skills == ()

    def test_level_given_by_name(self) -> None:
        req = SkillRequirement("Python", "advanced")
        assert req.required_level is ProficiencyLevel.ADVANCED

    def test_alternatives_frozen_to_tuple(self) -> None:
        req = SkillRequirement("Go", alternative_skills=["Rust"])
        assert req.alternative_skills == ("Rust",)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="skill_name"):
            SkillRequirement("  ")

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValueError, match="weight"):
            SkillRequirement("Python", weight=-1)

    def test_zero_weight_allowed(self) -> None:
        assert SkillRequirement("Python", weight=0).weight == 0

    def test_frozen(self) -> None:
        req = SkillRequirement("Python")
        with pytest.raises(dataclasses.FrozenInstanceError):
            req.weight = 5  # type: ignore[misc]


class TestContactSkill:
    def test_level_parsed(self) -> None:
        skill = ContactSkill("SQL", 3, last_used=date(2026, 1, 1))
        assert skill.level is ProficiencyLevel.ADVANCED

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            ContactSkill("")


class TestSkillRelationship:
    def test_round_trip_dict(self) -> None:
        rel = SkillRelationship(related=["A"], implies=["B"], categories=["C"])
        assert SkillRelationship.from_dict(rel.to_dict()) == rel

    def test_missing_fields_default_empty(self) -> None:
        rel = SkillRelationship.from_dict({"related": ["A"]})
        assert rel.implies == []
        assert rel.alternative_names == []

    def test_non_list_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be a list"):
            SkillRelationship.from_dict({"related": "A"})

    def test_blank_entry_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid entry"):
            SkillRelationship.from_dict({"implies": [""]})

    def test_copy_is_independent(self) -> None:
        rel = SkillRelationship(related=["A"])
        dup = rel.copy()
        dup.related.append("B")
        assert rel.related == ["A"]


class TestMatchOptions:
    def test_defaults(self) -> None:
        opts = MatchOptions()
        assert opts.consider_recency is True
        assert opts.recency_weight_factor == 0.2
        assert opts.certification_bonus == 10
        assert opts.related_skill_weight == 0.5
        assert opts.min_confidence_threshold == 0

    @pytest.mark.parametrize("field_name,value", [
        ("recency_weight_factor", 1.5),
        ("related_skill_weight", -0.1),
        ("certification_bonus", -5),
        ("min_confidence_threshold", 101),
    ])
    def test_out_of_range_rejected(self, field_name, value) -> None:
        with pytest.raises(ValueError, match=field_name):
            MatchOptions(**{field_name: value})

    def test_from_dict_ignores_unknown_keys(self) -> None:
        opts = MatchOptions.from_dict({"consider_recency": False, "colour": "blue"})
        assert opts.consider_recency is False

    def test_to_dict_round_trip(self) -> None:
        opts = MatchOptions(related_skill_weight=0.3)
        assert MatchOptions.from_dict(opts.to_dict()) == opts


class TestCandidate:
    def test_display_name_falls_back_to_id(self) -> None:
        assert Candidate("c-1").display_name == "c-1"
        assert Candidate("c-1", name="Ada").display_name == "Ada"

    def test_skills_frozen_to_tuple(self) -> None:
        cand = Candidate("c-1", skills=[ContactSkill("SQL")])
        assert isinstance(cand.skills, tuple)


class TestMatchResult:
    def test_with_candidate_leaves_original(self) -> None:
        base = MatchResult(score=40)
        tagged = base.with_candidate("c-1")
        assert tagged.candidate_id == "c-1"
        assert base.candidate_id is None

    def test_with_breakdown(self) -> None:
        base = MatchResult(score=40)
        updated = base.with_breakdown(ScoreBreakdown(skill_match=90), 77)
        assert updated.score == 77
        assert updated.breakdown.skill_match == 90
        assert base.breakdown.skill_match == 0


class TestFeedbackModels:
    def test_success_rate(self) -> None:
        assert SuccessStats(3, 4).rate == 0.75
        assert SuccessStats().rate == 0.0

    def test_adjustment_delta(self) -> None:
        assert FactorAdjustment("sql", 1.0, 1.1).delta == pytest.approx(0.1)

    def test_outcome_without_skills_is_malformed(self) -> None:
        assert not AssignmentOutcome("a-1", True, performance_score=80).is_well_formed

    def test_outcome_without_score_is_malformed(self) -> None:
        assert not AssignmentOutcome("a-1", True, skills_used=["SQL"]).is_well_formed

    def test_outcome_bool_score_is_malformed(self) -> None:
        outcome = AssignmentOutcome("a-1", True, performance_score=True, skills_used=["SQL"])
        assert not outcome.is_well_formed

    def test_complete_outcome_is_well_formed(self) -> None:
        outcome = AssignmentOutcome("a-1", False, performance_score=0, skills_used=[])
        assert outcome.is_well_formed


class TestGapModels:
    def test_severity_order(self) -> None:
        order = sorted(GapType, key=lambda g: g.severity)
        assert order == [GapType.CRITICAL, GapType.MODERATE, GapType.SCARCE, GapType.GOOD]

    def test_qualified_count(self) -> None:
        info = GapInfo(
            skill="SQL",
            required_level=ProficiencyLevel.ADVANCED,
            weight=50,
            is_required=True,
            gap_type=GapType.SCARCE,
            available_contacts=(
                ContactMatch("a", ContactSkill("SQL", ProficiencyLevel.EXPERT), 0),
                ContactMatch("b", ContactSkill("SQL", ProficiencyLevel.BEGINNER), 2),
            ),
        )
        assert info.qualified_count == 1
        assert info.describe() == "Only 1 qualified contact"

    def test_critical_describe(self) -> None:
        info = GapInfo("SQL", ProficiencyLevel.ADVANCED, 90, True, GapType.CRITICAL)
        assert info.describe() == "No contacts available"

    def test_empty_report(self) -> None:
        report = GapAnalysis().to_report()
        assert report["summary"]["total_skills"] == 0
        assert report["gaps"] == []
        assert report["workflow_recommendations"] == []
