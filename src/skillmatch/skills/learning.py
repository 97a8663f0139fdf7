"""Learning feedback loop — nudges per-skill weighting from assignment outcomes.

When historical assignments and their outcomes are fed back:
- Every skill an assignment required gets its learning factor adjusted:
  success → +performance/100 × success_step, failure → −performance/100 × failure_step.
- Factors are clamped to [factor_min, factor_max] (default [0.5, 1.5]).
- Skills used together are tracked as pairs; a pair observed more than
  pair_min_observations times with a success rate above
  pair_min_success_rate is promoted into the taxonomy: the second skill
  (in canonical order) joins the first skill's 'related' list.
- Success statistics accumulate on the loop instance across calls.

Key rules:
- This is a bounded heuristic, not a trained model.
- Malformed outcomes (no performance score or no skill list) are skipped
  individually; the batch continues.
- Learning factors and taxonomy notify their listeners on change, which
  clears the result cache.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Mapping, Optional

from skillmatch.models.feedback import (
    Assignment,
    AssignmentOutcome,
    FactorAdjustment,
    LearningUpdate,
    SuccessStats,
)
from skillmatch.policy.resolver import PolicyResolver
from skillmatch.skills.normalizer import normalize_skill_name
from skillmatch.skills.taxonomy import SkillTaxonomy

logger = logging.getLogger(__name__)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class LearningWeights:
    """Per-skill multiplicative learning factors, default 1.0.

    Keys are canonical skill keys; key_fn maps any spelling to one.
    """

    def __init__(
        self,
        min_factor: float = 0.5,
        max_factor: float = 1.5,
        key_fn: Callable[[str], str] = normalize_skill_name,
    ) -> None:
        if min_factor > max_factor:
            raise ValueError(
                f"min_factor ({min_factor}) must not exceed max_factor ({max_factor})"
            )
        self.min_factor = min_factor
        self.max_factor = max_factor
        self._key_fn = key_fn
        self._factors: dict[str, float] = {}
        self._listeners: list[Callable[[], None]] = []

    @classmethod
    def from_policy(
        cls,
        resolver: PolicyResolver,
        key_fn: Callable[[str], str] = normalize_skill_name,
    ) -> LearningWeights:
        """Build an empty table using the policy's factor bounds."""
        params = resolver.learning_params() if resolver.has_learning_config() else {}
        return cls(
            min_factor=float(params.get("factor_min", 0.5)),
            max_factor=float(params.get("factor_max", 1.5)),
            key_fn=key_fn,
        )

    def factor(self, skill_name: str) -> float:
        return self._factors.get(self._key_fn(skill_name), 1.0)

    def adjust(self, skill_name: str, delta: float) -> FactorAdjustment:
        """Add delta to a skill's factor, clamped to the allowed range."""
        key = self._key_fn(skill_name)
        old = self._factors.get(key, 1.0)
        new = _clamp(old + delta, self.min_factor, self.max_factor)
        self._factors[key] = new
        if new != old:
            self._notify()
        return FactorAdjustment(skill=key, old_factor=old, new_factor=new)

    def export(self) -> dict[str, float]:
        """Return a plain copy of all factors, for host-side persistence."""
        return dict(self._factors)

    def import_weights(self, weights: Mapping[str, float]) -> None:
        """Replace all factors. Values are clamped to the allowed range.

        Raises:
            ValueError: If a value is not a number.
        """
        imported: dict[str, float] = {}
        for name, value in weights.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Learning weight for '{name}' must be a number, got {value!r}")
            imported[self._key_fn(name)] = _clamp(float(value), self.min_factor, self.max_factor)
        self._factors = imported
        self._notify()

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    def __len__(self) -> int:
        return len(self._factors)


class LearningFeedbackLoop:
    """Consumes assignment outcomes to tune matching.

    Usage:
        loop = LearningFeedbackLoop(taxonomy, weights, resolver)
        update = loop.improve_matching(assignments, outcomes)
    """

    def __init__(
        self,
        taxonomy: SkillTaxonomy,
        weights: LearningWeights,
        resolver: Optional[PolicyResolver] = None,
    ) -> None:
        self._taxonomy = taxonomy
        self._weights = weights
        config = self._learning_config(resolver or PolicyResolver.defaults())
        self._success_step = float(config.get("success_step", 0.1))
        self._failure_step = float(config.get("failure_step", 0.05))
        self._pair_min_observations = int(config.get("pair_min_observations", 5))
        self._pair_min_success_rate = float(config.get("pair_min_success_rate", 0.8))
        self._skill_stats: dict[str, SuccessStats] = {}
        self._pair_stats: dict[tuple[str, str], SuccessStats] = {}
        self._display: dict[str, str] = {}

    def improve_matching(
        self,
        assignments: Iterable[Assignment],
        outcomes: Iterable[AssignmentOutcome],
    ) -> LearningUpdate:
        """Feed historical outcomes back into learning factors and the taxonomy.

        Assignments without a recorded outcome are ignored.

        Returns:
            LearningUpdate describing what changed.
        """
        outcome_map = {o.assignment_id: o for o in outcomes}
        processed = 0
        skipped = 0
        adjustments: list[FactorAdjustment] = []

        for assignment in assignments:
            outcome = outcome_map.get(assignment.assignment_id)
            if outcome is None:
                continue
            if not outcome.is_well_formed:
                logger.warning(
                    "Skipping malformed outcome for assignment %s",
                    assignment.assignment_id,
                )
                skipped += 1
                continue

            processed += 1
            used = self._distinct_skills(outcome.skills_used or ())

            for key in used:
                self._skill_stats[key] = self._record(self._skill_stats.get(key), outcome.success)

            for i in range(len(used)):
                for j in range(i + 1, len(used)):
                    pair = (used[i], used[j])
                    self._pair_stats[pair] = self._record(self._pair_stats.get(pair), outcome.success)

            performance = float(outcome.performance_score) / 100.0
            if outcome.success:
                delta = performance * self._success_step
            else:
                delta = -performance * self._failure_step
            for req in assignment.required_skills:
                adjustments.append(self._weights.adjust(req.skill_name, delta))

        promoted = self._promote_pairs()

        logger.info(
            "Learning update: %d processed, %d skipped, %d factor adjustments, %d promotions",
            processed, skipped, len(adjustments), len(promoted),
        )
        return LearningUpdate(
            processed=processed,
            skipped=skipped,
            adjustments=adjustments,
            promoted_pairs=promoted,
        )

    def _distinct_skills(self, names: Iterable[str]) -> list[str]:
        """Canonical keys of the used skills, deduplicated and sorted."""
        keys: set[str] = set()
        for name in names:
            key = self._taxonomy.canonical_key(name)
            if not key:
                continue
            self._display.setdefault(key, self._taxonomy.display_name(name))
            keys.add(key)
        return sorted(keys)

    @staticmethod
    def _record(stats: Optional[SuccessStats], success: bool) -> SuccessStats:
        stats = stats or SuccessStats()
        return SuccessStats(
            success=stats.success + (1 if success else 0),
            total=stats.total + 1,
        )

    def _promote_pairs(self) -> list[tuple[str, str]]:
        promoted: list[tuple[str, str]] = []
        for (first, second), stats in sorted(self._pair_stats.items()):
            if stats.total <= self._pair_min_observations:
                continue
            if stats.rate <= self._pair_min_success_rate:
                continue
            first_name = self._display.get(first, first)
            second_name = self._display.get(second, second)
            if self._taxonomy.add_related(first_name, second_name):
                promoted.append((first_name, second_name))
        return promoted

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def skill_success_rates(self) -> dict[str, SuccessStats]:
        return dict(self._skill_stats)

    def pair_success_rates(self) -> dict[tuple[str, str], SuccessStats]:
        return dict(self._pair_stats)

    @staticmethod
    def _learning_config(resolver: PolicyResolver) -> dict:
        if resolver.has_learning_config():
            return resolver.learning_params()
        return {
            "success_step": 0.1,
            "failure_step": 0.05,
            "pair_min_observations": 5,
            "pair_min_success_rate": 0.8,
        }
