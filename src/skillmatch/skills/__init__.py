"""Skills subsystem — taxonomy, matching, ranking, gap analysis, and learning."""

from skillmatch.skills.cache import MatchResultCache
from skillmatch.skills.calculator import MatchCalculator
from skillmatch.skills.gap_analyzer import GapAnalyzer
from skillmatch.skills.learning import LearningFeedbackLoop, LearningWeights
from skillmatch.skills.normalizer import SkillNormalizer, normalize_skill_name
from skillmatch.skills.ranker import CandidateRanker
from skillmatch.skills.taxonomy import SkillTaxonomy

__all__ = [
    "CandidateRanker",
    "GapAnalyzer",
    "LearningFeedbackLoop",
    "LearningWeights",
    "MatchCalculator",
    "MatchResultCache",
    "SkillNormalizer",
    "SkillTaxonomy",
    "normalize_skill_name",
]
