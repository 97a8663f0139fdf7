"""Skill match service — unified facade for the matching engine.

This is the primary interface for host applications. It composes:
- Skill taxonomy (relationship lookups, updates)
- Learning weights (per-skill factors, export/import)
- Result cache (memoized match results)
- Match calculator, candidate ranker, gap analyzer
- Learning feedback loop (historical outcomes)

Every component is an explicit instance owned by the service, so two
services never share a taxonomy or a cache.

Mutations (taxonomy updates, learning, weight import, cache clear) and
reads are serialized by one re-entrant lock, which makes cache
invalidation atomic relative to in-flight matches.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from skillmatch.models.feedback import Assignment, AssignmentOutcome, LearningUpdate
from skillmatch.models.gap import GapAnalysis
from skillmatch.models.match import MatchResult, RankedCandidate
from skillmatch.models.skill import (
    Candidate,
    ContactSkill,
    MatchOptions,
    SkillRelationship,
    SkillRequirement,
)
from skillmatch.policy.resolver import PolicyResolver
from skillmatch.skills.cache import MatchResultCache
from skillmatch.skills.calculator import MatchCalculator
from skillmatch.skills.gap_analyzer import GapAnalyzer, pool_from_candidates
from skillmatch.skills.learning import LearningFeedbackLoop, LearningWeights
from skillmatch.skills.ranker import CandidateRanker, DepartmentBonusFn, no_department_bonus
from skillmatch.skills.taxonomy import SkillTaxonomy

logger = logging.getLogger(__name__)


class SkillMatchService:
    """Matching engine facade.

    Usage:
        service = SkillMatchService.from_config_dir(Path("config"))

        result = service.calculate_match(requirements, skills)
        ranked = service.rank_candidates(requirements, candidates, limit=5)
        analysis = service.analyze_gaps(requirements, candidates)

        # Feed history back and persist the learned factors host-side
        service.improve_matching(assignments, outcomes)
        saved = service.export_learning_weights()
    """

    def __init__(
        self,
        resolver: Optional[PolicyResolver] = None,
        taxonomy: Optional[SkillTaxonomy] = None,
        department_bonus: DepartmentBonusFn = no_department_bonus,
    ) -> None:
        self._resolver = resolver or PolicyResolver.defaults()
        self._taxonomy = taxonomy if taxonomy is not None else SkillTaxonomy()
        self._weights = LearningWeights.from_policy(
            self._resolver, key_fn=self._taxonomy.canonical_key,
        )
        self._cache = MatchResultCache(self._resolver)
        self._calculator = MatchCalculator(
            self._taxonomy, self._weights, self._cache, self._resolver,
        )
        self._ranker = CandidateRanker(self._calculator, self._resolver, department_bonus)
        self._gap_analyzer = GapAnalyzer(self._taxonomy, self._resolver)
        self._learning = LearningFeedbackLoop(self._taxonomy, self._weights, self._resolver)
        self._lock = threading.RLock()

    @classmethod
    def from_config_dir(cls, config_dir: Path, **kwargs: Any) -> SkillMatchService:
        """Build a service from matching_policy.json and skill_taxonomy.json."""
        resolver = PolicyResolver.from_config_dir(config_dir)
        taxonomy = SkillTaxonomy.from_config_dir(config_dir)
        logger.info(
            "Loaded matching policy %s and taxonomy %s (%d skills)",
            resolver.version, taxonomy.version, taxonomy.skill_count(),
        )
        return cls(resolver, taxonomy, **kwargs)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def calculate_match(
        self,
        requirements: Sequence[SkillRequirement],
        candidate_skills: Sequence[ContactSkill],
        options: Optional[MatchOptions] = None,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        with self._lock:
            return self._calculator.calculate_match(requirements, candidate_skills, options, now)

    def rank_candidates(
        self,
        requirements: Sequence[SkillRequirement],
        candidates: Sequence[Candidate],
        limit: Optional[int] = None,
        options: Optional[MatchOptions] = None,
        now: Optional[datetime] = None,
    ) -> list[RankedCandidate]:
        with self._lock:
            return self._ranker.rank_candidates(requirements, candidates, limit, options, now)

    # ------------------------------------------------------------------
    # Gap analysis
    # ------------------------------------------------------------------

    def analyze_gaps(
        self,
        requirements: Sequence[SkillRequirement],
        candidates: Sequence[Candidate],
        demand: Optional[Mapping[str, int]] = None,
    ) -> GapAnalysis:
        with self._lock:
            return self._gap_analyzer.analyze_gaps(
                requirements, pool_from_candidates(candidates), demand,
            )

    def analyze_workflow_gaps(
        self,
        requirements: Sequence[SkillRequirement],
        candidates: Sequence[Candidate],
        other_tasks: Sequence[Sequence[SkillRequirement]],
    ) -> GapAnalysis:
        with self._lock:
            return self._gap_analyzer.analyze_workflow_gaps(
                requirements, pool_from_candidates(candidates), other_tasks,
            )

    # ------------------------------------------------------------------
    # Mutating entry points
    # ------------------------------------------------------------------

    def improve_matching(
        self,
        assignments: Iterable[Assignment],
        outcomes: Iterable[AssignmentOutcome],
    ) -> LearningUpdate:
        """Feed outcomes back. Factor and taxonomy changes clear the cache through listeners."""
        with self._lock:
            return self._learning.improve_matching(assignments, outcomes)

    def update_taxonomy(self, skill_name: str, relationship: SkillRelationship) -> None:
        with self._lock:
            self._taxonomy.update(skill_name, relationship)

    def get_skill_taxonomy(self, skill_name: str) -> Optional[SkillRelationship]:
        with self._lock:
            return self._taxonomy.lookup(skill_name)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def export_learning_weights(self) -> dict[str, float]:
        with self._lock:
            return self._weights.export()

    def import_learning_weights(self, weights: Mapping[str, float]) -> None:
        with self._lock:
            self._weights.import_weights(weights)
            logger.info("Imported %d learning weights", len(weights))

    def export_taxonomy(self) -> dict[str, Any]:
        with self._lock:
            return self._taxonomy.export()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def taxonomy(self) -> SkillTaxonomy:
        return self._taxonomy

    @property
    def learning(self) -> LearningFeedbackLoop:
        return self._learning

    @property
    def calculator(self) -> MatchCalculator:
        return self._calculator

    def status(self) -> dict[str, Any]:
        with self._lock:
            return {
                "policy_version": self._resolver.version,
                "taxonomy_version": self._taxonomy.version,
                "taxonomy_skills": self._taxonomy.skill_count(),
                "learning_weights": len(self._weights),
                "cache_entries": len(self._cache),
                "cache_hits": self._cache.hits,
                "cache_misses": self._cache.misses,
            }
