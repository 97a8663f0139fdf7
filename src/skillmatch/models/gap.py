"""Gap analysis models — per-requirement coverage across a candidate pool.

Gap classification, most severe first:
    CRITICAL → MODERATE → SCARCE → GOOD
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from skillmatch.models.skill import ContactSkill, ProficiencyLevel


class GapType(str, enum.Enum):
    CRITICAL = "critical"
    MODERATE = "moderate"
    SCARCE = "scarce"
    GOOD = "good"

    @property
    def severity(self) -> int:
        """Sort position, 0 being the most severe."""
        return _SEVERITY_ORDER[self]


_SEVERITY_ORDER = {
    GapType.CRITICAL: 0,
    GapType.MODERATE: 1,
    GapType.SCARCE: 2,
    GapType.GOOD: 3,
}


class SuggestionType(str, enum.Enum):
    LOWER_REQUIREMENT = "lower_requirement"
    TRAINING = "training"
    SPLIT_TASK = "split_task"
    EXTERNAL = "external"
    POSTPONE = "postpone"
    CROSS_TRAINING = "cross_training"


class Effort(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class ContactMatch:
    """One candidate's standing against a requirement.

    gap is the number of levels below the requirement (0 = meets it).
    Only candidates holding the skill appear as contacts or as the
    closest match; skill stays optional for callers building their own.
    """
    candidate_id: str
    skill: Optional[ContactSkill]
    gap: int

    @property
    def held_level(self) -> Optional[ProficiencyLevel]:
        return self.skill.level if self.skill is not None else None


@dataclass(frozen=True)
class ActionableSuggestion:
    type: SuggestionType
    description: str
    effort: Effort
    timeframe: str


@dataclass(frozen=True)
class GapInfo:
    """Coverage of a single requirement across the pool."""
    skill: str
    required_level: ProficiencyLevel
    weight: float
    is_required: bool
    gap_type: GapType
    available_contacts: tuple[ContactMatch, ...] = ()
    closest_match: Optional[ContactMatch] = None
    suggestions: tuple[ActionableSuggestion, ...] = ()
    overall_demand: int = 1  # number of tasks in the workflow needing this skill
    max_level: Optional[ProficiencyLevel] = None

    @property
    def qualified_count(self) -> int:
        return sum(1 for c in self.available_contacts if c.gap == 0)

    def describe(self) -> str:
        """Return a one-line human description of the gap."""
        qualified = self.qualified_count
        if self.gap_type == GapType.CRITICAL:
            return "No contacts available"
        if self.gap_type == GapType.MODERATE:
            if qualified == 0:
                if self.closest_match is not None:
                    return f"No qualified contacts (closest match: {self.closest_match.candidate_id})"
                return "No qualified contacts (none close)"
            return f"Limited qualified contacts ({qualified})"
        if self.gap_type == GapType.SCARCE:
            plural = "" if qualified == 1 else "s"
            return f"Only {qualified} qualified contact{plural}"
        return f"{qualified} qualified contacts available"


@dataclass(frozen=True)
class GapAnalysis:
    """Pool-wide gap analysis for one task."""
    gaps: tuple[GapInfo, ...] = ()
    total_requirements: int = 0
    fully_met: int = 0
    partially_met: int = 0
    unmet: int = 0
    workflow_recommendations: tuple[str, ...] = field(default_factory=tuple)

    def by_type(self, gap_type: GapType) -> list[GapInfo]:
        return [g for g in self.gaps if g.gap_type == gap_type]

    def to_report(self) -> dict[str, Any]:
        """Return a JSON-serializable summary for export by the host."""
        return {
            "summary": {
                "total_skills": len(self.gaps),
                "critical_gaps": len(self.by_type(GapType.CRITICAL)),
                "moderate_gaps": len(self.by_type(GapType.MODERATE)),
                "scarce_skills": len(self.by_type(GapType.SCARCE)),
                "fully_met": self.fully_met,
                "partially_met": self.partially_met,
                "unmet": self.unmet,
            },
            "gaps": [
                {
                    "skill": g.skill,
                    "required_level": g.required_level.label,
                    "gap_type": g.gap_type.value,
                    "available_contacts": len(g.available_contacts),
                    "overall_demand": g.overall_demand,
                    "suggestions": [s.description for s in g.suggestions],
                }
                for g in self.gaps
            ],
            "workflow_recommendations": list(self.workflow_recommendations),
        }
