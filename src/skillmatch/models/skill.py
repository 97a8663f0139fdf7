"""Skill data models — proficiency levels, requirements, held skills, taxonomy nodes.

These models represent the inputs to the matching engine:
- How proficient someone is (ProficiencyLevel)
- What a task demands (SkillRequirement)
- What a candidate declares (ContactSkill)
- How skills relate to each other (SkillRelationship)
- How a match should be computed (MatchOptions)

The engine only reads requirements and contact skills. Taxonomy nodes
are mutated only through the taxonomy's own update operations.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union


class ProficiencyLevel(int, enum.Enum):
    """Ordinal proficiency scale: BEGINNER < INTERMEDIATE < ADVANCED < EXPERT."""
    BEGINNER = 1
    INTERMEDIATE = 2
    ADVANCED = 3
    EXPERT = 4

    @property
    def label(self) -> str:
        """Return the lowercase display name, e.g. 'advanced'."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: Union[int, str, ProficiencyLevel]) -> ProficiencyLevel:
        """Parse a level from an enum member, an int, or a name.

        Raises:
            ValueError: If the value does not name a known level.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key not in cls.__members__:
                raise ValueError(f"Unknown proficiency level: '{value}'")
            return cls[key]
        return cls(value)


@dataclass(frozen=True)
class SkillRequirement:
    """A single skill demanded by a task.

    Weight is an importance figure on whatever scale the caller uses;
    it only needs to be consistent within one ranking call.
    """
    skill_name: str
    required_level: ProficiencyLevel = ProficiencyLevel.INTERMEDIATE
    weight: float = 1.0
    is_required: bool = True  # True = hard requirement, False = nice to have
    alternative_skills: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.skill_name, str) or not self.skill_name.strip():
            raise ValueError(f"skill_name must be a non-empty string, got {self.skill_name!r}")
        if self.weight < 0:
            raise ValueError(f"weight must be >= 0, got {self.weight}")
        object.__setattr__(self, "required_level", ProficiencyLevel.parse(self.required_level))
        object.__setattr__(self, "alternative_skills", tuple(self.alternative_skills))


@dataclass(frozen=True)
class ContactSkill:
    """A skill declared on a candidate record."""
    skill_name: str
    level: ProficiencyLevel = ProficiencyLevel.INTERMEDIATE
    years_of_experience: Optional[float] = None
    last_used: Optional[Union[date, datetime]] = None
    certified: bool = False
    validated_by: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.skill_name, str) or not self.skill_name.strip():
            raise ValueError(f"skill_name must be a non-empty string, got {self.skill_name!r}")
        object.__setattr__(self, "level", ProficiencyLevel.parse(self.level))


@dataclass
class SkillRelationship:
    """Taxonomy node for one canonical skill.

    All relationships are flat adjacency lists; a related or implied
    skill is never expanded further.
    """
    related: list[str] = field(default_factory=list)     # substitutable skills
    implies: list[str] = field(default_factory=list)     # covered automatically
    requires: list[str] = field(default_factory=list)    # prerequisites, informational
    categories: list[str] = field(default_factory=list)
    alternative_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "related": list(self.related),
            "implies": list(self.implies),
            "requires": list(self.requires),
            "categories": list(self.categories),
            "alternative_names": list(self.alternative_names),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillRelationship:
        """Build a relationship from a plain dict.

        Raises:
            ValueError: If any relationship field is not a list of strings.
        """
        kwargs: dict[str, list[str]] = {}
        for key in ("related", "implies", "requires", "categories", "alternative_names"):
            values = data.get(key, [])
            if not isinstance(values, list):
                raise ValueError(f"Relationship field '{key}' must be a list")
            for v in values:
                if not isinstance(v, str) or not v.strip():
                    raise ValueError(f"Invalid entry in '{key}': {v!r}")
            kwargs[key] = list(values)
        return cls(**kwargs)

    def copy(self) -> SkillRelationship:
        return SkillRelationship.from_dict(self.to_dict())


@dataclass(frozen=True)
class MatchOptions:
    """Tuning knobs for a single match computation."""
    consider_recency: bool = True
    recency_weight_factor: float = 0.2  # 0 - 1
    consider_certifications: bool = True
    certification_bonus: float = 10.0  # points
    include_related_skills: bool = True
    related_skill_weight: float = 0.5  # 0 - 1
    min_confidence_threshold: float = 0.0  # skill_match floor used by the ranker

    def __post_init__(self) -> None:
        if not (0.0 <= self.recency_weight_factor <= 1.0):
            raise ValueError(
                f"recency_weight_factor must be in [0.0, 1.0], "
                f"got {self.recency_weight_factor}"
            )
        if not (0.0 <= self.related_skill_weight <= 1.0):
            raise ValueError(
                f"related_skill_weight must be in [0.0, 1.0], "
                f"got {self.related_skill_weight}"
            )
        if self.certification_bonus < 0:
            raise ValueError(
                f"certification_bonus must be >= 0, got {self.certification_bonus}"
            )
        if not (0.0 <= self.min_confidence_threshold <= 100.0):
            raise ValueError(
                f"min_confidence_threshold must be in [0, 100], "
                f"got {self.min_confidence_threshold}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MatchOptions:
        """Build options from a dict, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> dict[str, Any]:
        return {
            "consider_recency": self.consider_recency,
            "recency_weight_factor": self.recency_weight_factor,
            "consider_certifications": self.consider_certifications,
            "certification_bonus": self.certification_bonus,
            "include_related_skills": self.include_related_skills,
            "related_skill_weight": self.related_skill_weight,
            "min_confidence_threshold": self.min_confidence_threshold,
        }


@dataclass(frozen=True)
class Candidate:
    """A person in the candidate pool, as supplied by the host.

    availability is a 0-100 score; current_workload is a utilization
    percentage. Both are optional signals blended in by the ranker.
    """
    candidate_id: str
    skills: tuple[ContactSkill, ...] = ()
    name: str = ""
    availability: Optional[float] = None
    current_workload: Optional[float] = None
    department: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "skills", tuple(self.skills))

    @property
    def display_name(self) -> str:
        return self.name or self.candidate_id
