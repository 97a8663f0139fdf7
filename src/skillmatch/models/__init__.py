"""Core data models for the skill matching engine."""

from skillmatch.models.feedback import Assignment, AssignmentOutcome, LearningUpdate
from skillmatch.models.gap import (
    ActionableSuggestion,
    ContactMatch,
    GapAnalysis,
    GapInfo,
    GapType,
)
from skillmatch.models.match import (
    Confidence,
    ExactMatch,
    Impact,
    MatchResult,
    NoMatch,
    RankedCandidate,
    RelatedMatch,
    RelationKind,
    ScoreBreakdown,
)
from skillmatch.models.skill import (
    Candidate,
    ContactSkill,
    MatchOptions,
    ProficiencyLevel,
    SkillRelationship,
    SkillRequirement,
)

__all__ = [
    "ActionableSuggestion",
    "Assignment",
    "AssignmentOutcome",
    "Candidate",
    "Confidence",
    "ContactMatch",
    "ContactSkill",
    "ExactMatch",
    "GapAnalysis",
    "GapInfo",
    "GapType",
    "Impact",
    "LearningUpdate",
    "MatchOptions",
    "MatchResult",
    "NoMatch",
    "ProficiencyLevel",
    "RankedCandidate",
    "RelatedMatch",
    "RelationKind",
    "ScoreBreakdown",
    "SkillRelationship",
    "SkillRequirement",
]
