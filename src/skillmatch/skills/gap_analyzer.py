"""Gap analyzer — classifies requirement coverage across a candidate pool.

For each requirement the analyzer finds who holds the skill, who meets
the required level ("qualified"), and the closest under-qualified holder,
then classifies the requirement:

    critical  zero qualified, hard requirement, weight ≥ 80
    moderate  zero qualified, or ≤1 qualified with weight ≥ 60
    scarce    ≤2 qualified
    good      otherwise

Adding qualified candidates never moves a requirement to a more severe
tier. Output is ordered by severity, then by descending weight.

Pure computation. Suggestions are descriptions for the host to act on.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from skillmatch.models.gap import (
    ActionableSuggestion,
    ContactMatch,
    Effort,
    GapAnalysis,
    GapInfo,
    GapType,
    SuggestionType,
)
from skillmatch.models.skill import (
    Candidate,
    ContactSkill,
    ProficiencyLevel,
    SkillRequirement,
)
from skillmatch.policy.resolver import PolicyResolver
from skillmatch.skills.normalizer import SkillNormalizer
from skillmatch.skills.taxonomy import SkillTaxonomy

PoolSkills = Mapping[str, Sequence[ContactSkill]]


def pool_from_candidates(candidates: Iterable[Candidate]) -> dict[str, tuple[ContactSkill, ...]]:
    """Index candidate skills by candidate_id, keeping pool order."""
    return {c.candidate_id: c.skills for c in candidates}


class GapAnalyzer:
    """Analyzes skill coverage of a pool against one task (or a workflow).

    Usage:
        analyzer = GapAnalyzer(taxonomy, resolver)
        analysis = analyzer.analyze_gaps(requirements, pool)
        for gap in analysis.by_type(GapType.CRITICAL): ...
    """

    def __init__(
        self,
        taxonomy: SkillTaxonomy,
        resolver: Optional[PolicyResolver] = None,
    ) -> None:
        self._normalizer = SkillNormalizer(taxonomy)
        config = self._gap_config(resolver or PolicyResolver.defaults())
        self._critical_min_weight = float(config.get("critical_min_weight", 80))
        self._moderate_min_weight = float(config.get("moderate_min_weight", 60))
        self._scarce_max_qualified = int(config.get("scarce_max_qualified", 2))
        self._postpone_below_weight = float(config.get("postpone_below_weight", 50))

    def build_demand_map(
        self, tasks: Iterable[Sequence[SkillRequirement]],
    ) -> dict[str, int]:
        """Count, per canonical skill, how many tasks require it."""
        demand: dict[str, int] = {}
        for task in tasks:
            keys = {self._normalizer.canonicalize(r.skill_name) for r in task}
            for key in keys:
                demand[key] = demand.get(key, 0) + 1
        return demand

    def analyze_workflow_gaps(
        self,
        requirements: Sequence[SkillRequirement],
        pool: PoolSkills,
        other_tasks: Sequence[Sequence[SkillRequirement]],
    ) -> GapAnalysis:
        """Analyze one task's gaps with demand counted across the workflow."""
        demand = self.build_demand_map([requirements, *other_tasks])
        return self.analyze_gaps(requirements, pool, demand)

    def analyze_gaps(
        self,
        requirements: Sequence[SkillRequirement],
        pool: PoolSkills,
        demand: Optional[Mapping[str, int]] = None,
    ) -> GapAnalysis:
        """Classify every requirement's coverage across the pool.

        Args:
            requirements: The task's skill requirements.
            pool: candidate_id → declared skills.
            demand: Optional canonical skill → task count map
                (see build_demand_map). Missing skills count as 1.

        Returns:
            GapAnalysis with gaps ordered by severity then weight.
        """
        gaps: list[GapInfo] = []
        fully_met = partially_met = unmet = 0

        for req in requirements:
            gap = self._analyze_requirement(req, pool, demand)
            gaps.append(gap)
            if gap.max_level is None:
                unmet += 1
            elif gap.max_level >= req.required_level:
                fully_met += 1
            else:
                partially_met += 1

        gaps.sort(key=lambda g: (g.gap_type.severity, -g.weight))

        return GapAnalysis(
            gaps=tuple(gaps),
            total_requirements=len(requirements),
            fully_met=fully_met,
            partially_met=partially_met,
            unmet=unmet,
            workflow_recommendations=tuple(self._workflow_recommendations(gaps)),
        )

    def classify(self, requirement: SkillRequirement, qualified_count: int) -> GapType:
        if (
            qualified_count == 0
            and requirement.is_required
            and requirement.weight >= self._critical_min_weight
        ):
            return GapType.CRITICAL
        if qualified_count == 0 or (
            qualified_count <= 1 and requirement.weight >= self._moderate_min_weight
        ):
            return GapType.MODERATE
        if qualified_count <= self._scarce_max_qualified:
            return GapType.SCARCE
        return GapType.GOOD

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _held_skill(self, key: str, skills: Sequence[ContactSkill]) -> Optional[ContactSkill]:
        best: Optional[ContactSkill] = None
        for skill in skills:
            if self._normalizer.canonicalize(skill.skill_name) != key:
                continue
            if best is None or skill.level > best.level:
                best = skill
        return best

    def _analyze_requirement(
        self,
        req: SkillRequirement,
        pool: PoolSkills,
        demand: Optional[Mapping[str, int]],
    ) -> GapInfo:
        key = self._normalizer.canonicalize(req.skill_name)
        required = int(req.required_level)

        contacts: list[ContactMatch] = []
        closest: Optional[ContactMatch] = None
        for candidate_id, skills in pool.items():
            held = self._held_skill(key, skills)
            if held is None:
                continue
            if held.level >= req.required_level:
                contacts.append(ContactMatch(candidate_id, held, 0))
                continue
            match = ContactMatch(candidate_id, held, required - int(held.level))
            if closest is None or match.gap < closest.gap:
                closest = match
            contacts.append(match)

        contacts.sort(key=lambda c: c.gap)
        qualified = sum(1 for c in contacts if c.gap == 0)
        gap_type = self.classify(req, qualified)
        held_levels = [c.skill.level for c in contacts if c.skill is not None]

        suggestions: list[ActionableSuggestion] = []
        if gap_type != GapType.GOOD:
            suggestions = self._suggestions(req, contacts, closest, gap_type, qualified)

        return GapInfo(
            skill=req.skill_name,
            required_level=req.required_level,
            weight=req.weight,
            is_required=req.is_required,
            gap_type=gap_type,
            available_contacts=tuple(contacts),
            closest_match=closest,
            suggestions=tuple(suggestions),
            overall_demand=demand.get(key, 1) if demand else 1,
            max_level=max(held_levels) if held_levels else None,
        )

    def _suggestions(
        self,
        req: SkillRequirement,
        contacts: list[ContactMatch],
        closest: Optional[ContactMatch],
        gap_type: GapType,
        qualified: int,
    ) -> list[ActionableSuggestion]:
        suggestions: list[ActionableSuggestion] = []

        if (
            req.required_level > ProficiencyLevel.BEGINNER
            and closest is not None
        ):
            suggestions.append(ActionableSuggestion(
                type=SuggestionType.LOWER_REQUIREMENT,
                description=(
                    f"Lower requirement to {closest.skill.level.label} level "
                    f"({closest.candidate_id} available)"
                ),
                effort=Effort.LOW,
                timeframe="Immediate",
            ))

        if closest is not None:
            levels = "1 level" if closest.gap == 1 else f"{closest.gap} levels"
            suggestions.append(ActionableSuggestion(
                type=SuggestionType.TRAINING,
                description=f"Provide training to {closest.candidate_id} ({levels} to go)",
                effort=Effort.MEDIUM if closest.gap == 1 else Effort.HIGH,
                timeframe="1-2 weeks" if closest.gap == 1 else "1-2 months",
            ))

        partial = [c for c in contacts if c.gap > 0]
        if len(partial) >= 2:
            suggestions.append(ActionableSuggestion(
                type=SuggestionType.SPLIT_TASK,
                description=(
                    f"Split task between {partial[0].candidate_id} "
                    f"and {partial[1].candidate_id}"
                ),
                effort=Effort.MEDIUM,
                timeframe="1 week planning",
            ))

        if gap_type == GapType.CRITICAL or (gap_type == GapType.MODERATE and req.is_required):
            suggestions.append(ActionableSuggestion(
                type=SuggestionType.EXTERNAL,
                description=(
                    f"Hire contractor/freelancer with {req.required_level.label} "
                    f"{req.skill_name} skills"
                ),
                effort=Effort.HIGH,
                timeframe="1-4 weeks",
            ))

        if not req.is_required or req.weight < self._postpone_below_weight:
            suggestions.append(ActionableSuggestion(
                type=SuggestionType.POSTPONE,
                description="Postpone task until skills are available or requirements change",
                effort=Effort.LOW,
                timeframe="Flexible",
            ))

        if qualified == 1 and req.is_required:
            suggestions.append(ActionableSuggestion(
                type=SuggestionType.CROSS_TRAINING,
                description=(
                    f"Cross-train additional team members in {req.skill_name} "
                    f"to reduce single point of failure"
                ),
                effort=Effort.MEDIUM,
                timeframe="2-4 weeks",
            ))

        return suggestions

    @staticmethod
    def _workflow_recommendations(gaps: list[GapInfo]) -> list[str]:
        recs: list[str] = []
        critical = [g.skill for g in gaps if g.gap_type == GapType.CRITICAL and g.overall_demand > 1]
        if critical:
            recs.append(
                f"Priority hiring needed for: {', '.join(critical)} "
                f"(critical skills needed across multiple tasks)"
            )
        scarce = [g.skill for g in gaps if g.gap_type == GapType.SCARCE and g.overall_demand > 2]
        if scarce:
            recs.append(
                f"Cross-train additional team members in: {', '.join(scarce)} "
                f"(high demand, limited availability)"
            )
        return recs

    @staticmethod
    def _gap_config(resolver: PolicyResolver) -> dict:
        if resolver.has_gap_config():
            return resolver.gap_thresholds()
        return {
            "critical_min_weight": 80,
            "moderate_min_weight": 60,
            "scarce_max_qualified": 2,
            "postpone_below_weight": 50,
        }
