"""Match calculator — scores one candidate's skills against a requirement set.

Pure computation apart from the result cache.

Per requirement the candidate's skills are resolved in order:
    exact (incl. taxonomy alternative names) → requirement alternatives
    → a held skill that implies it → a taxonomy-related skill.

Per-skill score:
    base      = weight × {held ≥ req: 1.0, req−1: 0.5, req−2: 0.2, else 0}
    score     = base × learning factor × recency × certification
    capped at 1.2 × weight, then × relation multiplier for non-exact
    matches (implied 0.8, alternative 0.9, related related_skill_weight).

skill_match = round(100 × Σ achieved / Σ weight), clamped to [0, 100];
0 when the weight sum is 0.

Overall score is a weighted blend of the breakdown; absent optional
bonuses drop out of both numerator and denominator.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Iterable, Optional, Sequence, Union

from skillmatch.models.match import (
    Confidence,
    ExactMatch,
    Impact,
    MatchedSkill,
    MatchResult,
    MissingSkill,
    NoMatch,
    PartialMatch,
    RelatedMatch,
    RelationKind,
    ScoreBreakdown,
    SkillResolution,
)
from skillmatch.models.skill import ContactSkill, MatchOptions, SkillRequirement
from skillmatch.policy.resolver import PolicyResolver
from skillmatch.skills.cache import MatchResultCache, make_key
from skillmatch.skills.learning import LearningWeights
from skillmatch.skills.taxonomy import SkillTaxonomy

MAX_RECOMMENDATIONS = 5
SCORE_CAP = 1.2  # achieved score never exceeds 120% of the weight
STALE_MONTHS = 24
RECENT_MONTHS = 12
KEY_SKILL_WEIGHT = 70

_LEVEL_GAP_MULTIPLIERS = {0: 1.0, 1: 0.5, 2: 0.2}

_BLEND_FIELDS = (
    "skill_match",
    "availability_score",
    "workload_score",
    "department_bonus",
    "certification_bonus",
    "recency_bonus",
)

DEFAULT_BLEND_WEIGHTS = {
    "skill_match": 0.5,
    "availability_score": 0.2,
    "workload_score": 0.15,
    "department_bonus": 0.05,
    "certification_bonus": 0.05,
    "recency_bonus": 0.05,
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def months_since(when: Union[date, datetime], now: Union[date, datetime]) -> int:
    """Whole calendar months between two dates, never negative."""
    months = (now.year - when.year) * 12 + (now.month - when.month)
    return max(0, months)


def blend_score(breakdown: ScoreBreakdown, weights: dict[str, float]) -> int:
    """Weighted average of the breakdown components present, clamped to [0, 100]."""
    total = 0.0
    weight_sum = 0.0
    for name in _BLEND_FIELDS:
        value = getattr(breakdown, name)
        if value is None:
            continue
        w = weights.get(name, 0.0)
        total += value * w
        weight_sum += w
    if weight_sum <= 0:
        return 0
    return max(0, min(100, round_half_up(total / weight_sum)))


class MatchCalculator:
    """Computes MatchResult values, memoized through a MatchResultCache.

    Usage:
        calculator = MatchCalculator(taxonomy, resolver=resolver)
        result = calculator.calculate_match(requirements, skills)
    """

    def __init__(
        self,
        taxonomy: SkillTaxonomy,
        weights: Optional[LearningWeights] = None,
        cache: Optional[MatchResultCache] = None,
        resolver: Optional[PolicyResolver] = None,
    ) -> None:
        self._resolver = resolver or PolicyResolver.defaults()
        self._taxonomy = taxonomy
        self._weights = weights if weights is not None else LearningWeights.from_policy(
            self._resolver, key_fn=taxonomy.canonical_key,
        )
        self._cache = cache if cache is not None else MatchResultCache(self._resolver)
        self._taxonomy.add_listener(self._cache.clear)
        self._weights.add_listener(self._cache.clear)

    @property
    def taxonomy(self) -> SkillTaxonomy:
        return self._taxonomy

    @property
    def weights(self) -> LearningWeights:
        return self._weights

    @property
    def cache(self) -> MatchResultCache:
        return self._cache

    def default_options(self) -> MatchOptions:
        if self._resolver.has_match_options_config():
            return MatchOptions.from_dict(self._resolver.match_option_defaults())
        return MatchOptions()

    def blend_weights(self) -> dict[str, float]:
        if self._resolver.has_scoring_config():
            configured = self._resolver.score_blend_weights()
            if configured:
                return configured
        return dict(DEFAULT_BLEND_WEIGHTS)

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def calculate_match(
        self,
        requirements: Sequence[SkillRequirement],
        candidate_skills: Sequence[ContactSkill],
        options: Optional[MatchOptions] = None,
        now: Optional[datetime] = None,
    ) -> MatchResult:
        """Score a candidate's skills against a requirement set.

        Args:
            requirements: The task's skill requirements. Empty → skill_match 0.
            candidate_skills: The candidate's declared skills.
            options: Match options; policy defaults when omitted.
            now: Override current time (for testing).

        Returns:
            MatchResult with candidate_id unset and default availability,
            workload and department signals.
        """
        opts = options or self.default_options()
        now = now or datetime.now(timezone.utc)

        key = self.cache_key(requirements, candidate_skills, opts, now)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        result = self._compute(requirements, candidate_skills, opts, now)
        self._cache.put(key, result)
        return result

    def cache_key(
        self,
        requirements: Sequence[SkillRequirement],
        candidate_skills: Sequence[ContactSkill],
        options: MatchOptions,
        now: Union[date, datetime],
    ) -> str:
        """Digest of every input that can change the result.

        Recency only depends on calendar months, so the reference month
        is part of the key instead of the exact timestamp.
        """
        req_tuples = sorted(
            (
                [
                    r.skill_name,
                    int(r.required_level),
                    r.weight,
                    r.is_required,
                    list(r.alternative_skills),
                ]
                for r in requirements
            ),
            key=repr,
        )
        skill_tuples = sorted(
            (
                [
                    s.skill_name,
                    int(s.level),
                    s.years_of_experience,
                    s.last_used.isoformat() if s.last_used is not None else None,
                    s.certified,
                    s.validated_by,
                ]
                for s in candidate_skills
            ),
            key=repr,
        )
        return make_key({
            "requirements": req_tuples,
            "skills": skill_tuples,
            "options": options.to_dict(),
            "month": f"{now.year:04d}-{now.month:02d}",
        })

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def skill_map(self, skills: Iterable[ContactSkill]) -> dict[str, ContactSkill]:
        """Index skills by canonical key, keeping the strongest duplicate."""
        result: dict[str, ContactSkill] = {}
        for skill in skills:
            key = self._taxonomy.canonical_key(skill.skill_name)
            existing = result.get(key)
            if existing is None or (skill.level, skill.certified) > (existing.level, existing.certified):
                result[key] = skill
        return result

    def find_best_match(
        self,
        requirement: SkillRequirement,
        skill_map: dict[str, ContactSkill],
        options: MatchOptions,
    ) -> SkillResolution:
        key = self._taxonomy.canonical_key(requirement.skill_name)
        if key in skill_map:
            return ExactMatch(skill_map[key])

        for alt in requirement.alternative_skills:
            alt_key = self._taxonomy.canonical_key(alt)
            if alt_key in skill_map:
                return RelatedMatch(skill_map[alt_key], RelationKind.ALTERNATIVE)

        if not options.include_related_skills:
            return NoMatch()

        # Strongest held skill that implies the requirement
        implying = [
            skill for held_key, skill in sorted(skill_map.items())
            if self._taxonomy.implies(held_key, key)
        ]
        if implying:
            best = max(implying, key=lambda s: s.level)
            return RelatedMatch(best, RelationKind.IMPLIES)

        for related in self._taxonomy.related_skills(key):
            related_key = self._taxonomy.canonical_key(related)
            if related_key in skill_map:
                return RelatedMatch(skill_map[related_key], RelationKind.RELATED)

        return NoMatch()

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def skill_score(
        self,
        requirement: SkillRequirement,
        skill: ContactSkill,
        options: MatchOptions,
        now: Union[date, datetime],
    ) -> float:
        """Achieved score for one requirement held at skill.level."""
        gap = int(requirement.required_level) - int(skill.level)
        weight = requirement.weight
        score = weight * _LEVEL_GAP_MULTIPLIERS.get(max(0, gap), 0.0)

        score *= self._weights.factor(requirement.skill_name)

        if options.consider_recency and skill.last_used is not None:
            months = months_since(skill.last_used, now)
            factor = options.recency_weight_factor
            if months < 6:
                score *= 1 + 0.5 * factor
            elif months < 12:
                pass
            elif months < 24:
                score *= 1 - 0.25 * factor
            else:
                score *= 1 - 0.5 * factor

        if options.consider_certifications and skill.certified:
            score *= 1 + options.certification_bonus / 100

        return min(score, weight * SCORE_CAP)

    def related_skill_score(
        self,
        requirement: SkillRequirement,
        skill: ContactSkill,
        kind: RelationKind,
        options: MatchOptions,
        now: Union[date, datetime],
    ) -> float:
        base = self.skill_score(requirement, skill, options, now)
        if kind == RelationKind.IMPLIES:
            return base * 0.8
        if kind == RelationKind.ALTERNATIVE:
            return base * 0.9
        return base * options.related_skill_weight

    def _compute(
        self,
        requirements: Sequence[SkillRequirement],
        candidate_skills: Sequence[ContactSkill],
        opts: MatchOptions,
        now: datetime,
    ) -> MatchResult:
        skill_map = self.skill_map(candidate_skills)

        total_weight = 0.0
        achieved = 0.0
        required_total = 0
        required_met = 0
        matched: list[MatchedSkill] = []
        missing: list[MissingSkill] = []
        partial: list[PartialMatch] = []

        for req in requirements:
            if req.is_required:
                required_total += 1
            total_weight += req.weight
            resolution = self.find_best_match(req, skill_map, opts)

            if isinstance(resolution, ExactMatch):
                held = resolution.skill
                score = self.skill_score(req, held, opts, now)
                achieved += score
                matched.append(MatchedSkill(
                    skill=req.skill_name,
                    required=req.required_level,
                    held=held.level,
                    score=self._percentage(score, req.weight),
                ))
                if req.is_required and held.level >= req.required_level:
                    required_met += 1
            elif isinstance(resolution, RelatedMatch):
                score = self.related_skill_score(req, resolution.skill, resolution.kind, opts, now)
                achieved += score
                partial.append(PartialMatch(
                    skill=req.skill_name,
                    match_type=resolution.kind,
                    via=resolution.skill.skill_name,
                    score=self._percentage(score, req.weight),
                ))
            else:
                missing.append(MissingSkill(
                    skill=req.skill_name,
                    required=req.required_level,
                    held=None,
                    impact=self._impact(req),
                ))

        skill_match = 0
        if total_weight > 0:
            skill_match = max(0, min(100, round_half_up(100 * achieved / total_weight)))

        breakdown = ScoreBreakdown(
            skill_match=skill_match,
            certification_bonus=(
                self._certification_bonus(candidate_skills, opts)
                if opts.consider_certifications else None
            ),
            recency_bonus=(
                self._recency_bonus(candidate_skills, opts, now)
                if opts.consider_recency else None
            ),
        )

        return MatchResult(
            score=blend_score(breakdown, self.blend_weights()),
            breakdown=breakdown,
            matched_skills=tuple(matched),
            missing_skills=tuple(missing),
            partial_matches=tuple(partial),
            recommendations=tuple(self._recommendations(
                missing, requirements, candidate_skills, skill_map, now,
            )),
            confidence=self._confidence(required_met, required_total, skill_match),
        )

    @staticmethod
    def _percentage(score: float, weight: float) -> int:
        if weight <= 0:
            return 0
        return round_half_up(score / weight * 100)

    @staticmethod
    def _impact(req: SkillRequirement) -> Impact:
        if req.is_required:
            return Impact.HIGH
        return Impact.MEDIUM if req.weight > 50 else Impact.LOW

    @staticmethod
    def _confidence(met: int, total: int, skill_match: int) -> Confidence:
        if met == total and skill_match > 80:
            return Confidence.HIGH
        if met >= total * 0.7 and skill_match > 60:
            return Confidence.MEDIUM
        return Confidence.LOW

    @staticmethod
    def _certification_bonus(skills: Sequence[ContactSkill], opts: MatchOptions) -> int:
        if not skills:
            return 0
        certified = sum(1 for s in skills if s.certified)
        return round_half_up(certified / len(skills) * opts.certification_bonus)

    @staticmethod
    def _recency_bonus(
        skills: Sequence[ContactSkill], opts: MatchOptions, now: datetime,
    ) -> int:
        recent = sum(
            1 for s in skills
            if s.last_used is not None and months_since(s.last_used, now) < RECENT_MONTHS
        )
        rate = recent / max(len(skills), 1)
        return round_half_up(rate * opts.recency_weight_factor * 20)

    def _recommendations(
        self,
        missing: list[MissingSkill],
        requirements: Sequence[SkillRequirement],
        candidate_skills: Sequence[ContactSkill],
        skill_map: dict[str, ContactSkill],
        now: datetime,
    ) -> list[str]:
        recs: list[str] = []

        for m in missing:
            if m.impact == Impact.HIGH:
                recs.append(f"Priority: Acquire {m.skill} skills ({m.required.label} level)")

        for skill in candidate_skills:
            if skill.last_used is None:
                continue
            months = months_since(skill.last_used, now)
            if months > STALE_MONTHS:
                recs.append(f"Refresh {skill.skill_name} skills (last used {months} months ago)")

        for req in requirements:
            if not req.is_required or req.weight <= KEY_SKILL_WEIGHT:
                continue
            held = skill_map.get(self._taxonomy.canonical_key(req.skill_name))
            if held is not None and not held.certified:
                recs.append(f"Consider certification in {req.skill_name}")

        return recs[:MAX_RECOMMENDATIONS]
