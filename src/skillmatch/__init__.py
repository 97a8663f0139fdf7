"""Skill-based candidate matching, ranking, and gap analysis."""

from skillmatch.service import SkillMatchService

__version__ = "0.1.0"

__all__ = ["SkillMatchService", "__version__"]
