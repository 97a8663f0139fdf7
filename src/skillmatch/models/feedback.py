"""Historical assignment models consumed by the learning feedback loop.

The engine never creates Assignment or AssignmentOutcome records; the
host's storage layer supplies them. Outcomes may be incomplete, in
which case the loop skips them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from skillmatch.models.skill import SkillRequirement


@dataclass(frozen=True)
class Assignment:
    """A past task assignment."""
    assignment_id: str
    candidate_id: str
    task_id: str
    required_skills: tuple[SkillRequirement, ...] = ()
    assigned_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "required_skills", tuple(self.required_skills))


@dataclass(frozen=True)
class AssignmentOutcome:
    """How an assignment turned out.

    performance_score is 0-100. A missing score or skill list marks the
    record as malformed.
    """
    assignment_id: str
    success: bool
    performance_score: Optional[float] = None
    skills_used: Optional[tuple[str, ...]] = None
    skills_lacking: tuple[str, ...] = ()
    feedback: str = ""

    def __post_init__(self) -> None:
        if self.skills_used is not None:
            object.__setattr__(self, "skills_used", tuple(self.skills_used))
        object.__setattr__(self, "skills_lacking", tuple(self.skills_lacking))

    @property
    def is_well_formed(self) -> bool:
        if self.skills_used is None:
            return False
        if isinstance(self.performance_score, bool):
            return False
        return isinstance(self.performance_score, (int, float))


@dataclass(frozen=True)
class SuccessStats:
    success: int = 0
    total: int = 0

    @property
    def rate(self) -> float:
        """Success rate; 0.0 when nothing was observed."""
        if self.total == 0:
            return 0.0
        return self.success / self.total


@dataclass(frozen=True)
class FactorAdjustment:
    """Change applied to one skill's learning factor."""
    skill: str
    old_factor: float
    new_factor: float

    @property
    def delta(self) -> float:
        return self.new_factor - self.old_factor


@dataclass(frozen=True)
class LearningUpdate:
    """Result of one improve_matching call."""
    processed: int
    skipped: int
    adjustments: list[FactorAdjustment] = field(default_factory=list)
    promoted_pairs: list[tuple[str, str]] = field(default_factory=list)
