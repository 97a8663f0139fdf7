"""Candidate ranker — combines skill match, availability, and workload.

Ranks a candidate pool for a task using:
  score = Σ w_i × component_i / Σ w_i   over the components present

with default weights skill_match 0.5, availability 0.2, workload 0.15,
department 0.05, certification 0.05, recency 0.05.

Pure computation engine. The host supplies availability, workload and
department data on the Candidate records.

Tie-breaking: equal scores keep their original pool order (stable sort).
"""

from __future__ import annotations

import dataclasses
from datetime import datetime
from typing import Callable, Optional, Sequence

from skillmatch.models.match import MatchResult, RankedCandidate
from skillmatch.models.skill import Candidate, MatchOptions, SkillRequirement
from skillmatch.policy.resolver import PolicyResolver
from skillmatch.skills.calculator import MatchCalculator, blend_score

DepartmentBonusFn = Callable[[Candidate, Sequence[SkillRequirement]], float]

_DEFAULT_WORKLOAD_BANDS = [
    {"below": 50, "score": 100},
    {"below": 70, "score": 80},
    {"below": 90, "score": 50},
]


def no_department_bonus(candidate: Candidate, requirements: Sequence[SkillRequirement]) -> float:
    return 0.0


class CandidateRanker:
    """Finds and ranks candidates for a task.

    Usage:
        ranker = CandidateRanker(calculator, resolver)
        ranked = ranker.rank_candidates(requirements, candidates, limit=10)
        # ranked[0].rank == 1
    """

    def __init__(
        self,
        calculator: MatchCalculator,
        resolver: Optional[PolicyResolver] = None,
        department_bonus: DepartmentBonusFn = no_department_bonus,
    ) -> None:
        self._calculator = calculator
        self._resolver = resolver or PolicyResolver.defaults()
        self._department_bonus = department_bonus

    def rank_candidates(
        self,
        requirements: Sequence[SkillRequirement],
        candidates: Sequence[Candidate],
        limit: Optional[int] = None,
        options: Optional[MatchOptions] = None,
        now: Optional[datetime] = None,
    ) -> list[RankedCandidate]:
        """Score and rank every candidate in the pool.

        Args:
            requirements: Task skill requirements.
            candidates: The pool, in its original order.
            limit: Maximum number of results (None = all).
            options: Match options; policy defaults when omitted.
            now: Override current time (for testing).

        Returns:
            RankedCandidate list, ranks 1..N, sorted by score descending.
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        opts = options or self._calculator.default_options()

        scored: list[tuple[Candidate, MatchResult]] = []
        for candidate in candidates:
            result = self.score_candidate(requirements, candidate, opts, now)
            if result.breakdown.skill_match < opts.min_confidence_threshold:
                continue
            scored.append((candidate, result))

        # list.sort is stable: equal scores keep pool order
        scored.sort(key=lambda pair: -pair[1].score)

        ranked = [
            RankedCandidate(candidate=candidate, match_result=result, rank=index + 1)
            for index, (candidate, result) in enumerate(scored)
        ]
        return ranked if limit is None else ranked[:limit]

    def score_candidate(
        self,
        requirements: Sequence[SkillRequirement],
        candidate: Candidate,
        options: Optional[MatchOptions] = None,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        """Match one candidate and blend in its non-skill signals."""
        base = self._calculator.calculate_match(
            requirements, candidate.skills, options, now,
        )
        breakdown = dataclasses.replace(
            base.breakdown,
            availability_score=self.availability_score(candidate),
            workload_score=self.workload_score(candidate),
            department_bonus=self._department_bonus(candidate, requirements),
        )
        score = blend_score(breakdown, self._calculator.blend_weights())
        return base.with_candidate(candidate.candidate_id).with_breakdown(breakdown, score)

    @staticmethod
    def availability_score(candidate: Candidate) -> float:
        if candidate.availability is None:
            return 100.0
        return max(0.0, min(100.0, float(candidate.availability)))

    def workload_score(self, candidate: Candidate) -> float:
        """Map utilization to a 0-100 score: <50% → 100, <70% → 80, <90% → 50, else 20."""
        workload = candidate.current_workload or 0.0
        bands, floor = self._workload_bands()
        for band in bands:
            if workload < band["below"]:
                return float(band["score"])
        return floor

    def _workload_bands(self) -> tuple[list[dict], float]:
        if self._resolver.has_scoring_config():
            bands = self._resolver.workload_bands()
            if bands:
                return bands, self._resolver.workload_floor_score()
        return _DEFAULT_WORKLOAD_BANDS, 20.0
