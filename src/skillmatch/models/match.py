"""Match result models — score breakdown, per-skill explanations, rankings.

A MatchResult is produced fresh (or served from cache) per call and is
never mutated afterwards. The ranker derives new results with
dataclasses.replace rather than editing cached ones.

Skill resolution is a tagged variant:
    NoMatch | ExactMatch(skill) | RelatedMatch(skill, kind)
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Optional, Union

from skillmatch.models.skill import Candidate, ContactSkill, ProficiencyLevel


class Confidence(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Impact(str, enum.Enum):
    """How much a missing skill hurts the match."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RelationKind(str, enum.Enum):
    """Kind of non-exact match, with its own score multiplier."""
    IMPLIES = "implied"
    ALTERNATIVE = "alternative"
    RELATED = "related"


# ------------------------------------------------------------------
# Skill resolution variant
# ------------------------------------------------------------------

@dataclass(frozen=True)
class NoMatch:
    """The candidate holds nothing that covers the requirement."""


@dataclass(frozen=True)
class ExactMatch:
    """The candidate holds the required skill itself (or a synonym of it)."""
    skill: ContactSkill


@dataclass(frozen=True)
class RelatedMatch:
    """The candidate holds a substitute linked to the required skill."""
    skill: ContactSkill
    kind: RelationKind


SkillResolution = Union[NoMatch, ExactMatch, RelatedMatch]


# ------------------------------------------------------------------
# Result pieces
# ------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreBreakdown:
    """Components of the overall score.

    skill_match, availability_score and workload_score are 0-100.
    department_bonus, certification_bonus and recency_bonus are small
    additive figures. The two optional bonuses are None when the
    corresponding option is disabled and then drop out of the blend.
    """
    skill_match: int = 0
    availability_score: float = 100.0
    workload_score: float = 100.0
    department_bonus: float = 0.0
    certification_bonus: Optional[int] = None
    recency_bonus: Optional[int] = None


@dataclass(frozen=True)
class MatchedSkill:
    skill: str
    required: ProficiencyLevel
    held: ProficiencyLevel
    score: int  # percentage of the requirement's weight achieved


@dataclass(frozen=True)
class MissingSkill:
    skill: str
    required: ProficiencyLevel
    held: Optional[ProficiencyLevel]
    impact: Impact


@dataclass(frozen=True)
class PartialMatch:
    skill: str
    match_type: RelationKind
    via: str  # the candidate skill that stood in for the requirement
    score: int


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one candidate against a requirement set."""
    candidate_id: Optional[str] = None
    score: int = 0  # 0 - 100
    breakdown: ScoreBreakdown = dataclasses.field(default_factory=ScoreBreakdown)
    matched_skills: tuple[MatchedSkill, ...] = ()
    missing_skills: tuple[MissingSkill, ...] = ()
    partial_matches: tuple[PartialMatch, ...] = ()
    recommendations: tuple[str, ...] = ()
    confidence: Confidence = Confidence.LOW

    def with_candidate(self, candidate_id: str) -> MatchResult:
        return dataclasses.replace(self, candidate_id=candidate_id)

    def with_breakdown(self, breakdown: ScoreBreakdown, score: int) -> MatchResult:
        return dataclasses.replace(self, breakdown=breakdown, score=score)


@dataclass(frozen=True)
class RankedCandidate:
    """A candidate with its match result and 1-based rank."""
    candidate: Candidate
    match_result: MatchResult
    rank: int
