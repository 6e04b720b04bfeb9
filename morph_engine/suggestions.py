"""
suggestions.py - pairing suggestion flow
Cross -> demand -> risk -> score -> rationale -> plan, for one pair or a whole collection
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from .genetics import GeneticsEngine
from .goals import prefilter_by_goal, prob_goal_for_pair
from .models import Animal, Demand, Goal, Outcome, ScoreWeights, Suggestion
from .planner import MultiGenerationPlanner, Population
from .scoring import RiskRule, apply_risk_flags, final_score


logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3
DEFAULT_SEARCH_LIMIT = 6
MAX_KEYWORDS = 6


def _env_concurrency() -> int:
    raw = os.environ.get("SUGGESTION_CONCURRENCY")
    if raw:
        try:
            value = int(float(raw))
        except (ValueError, OverflowError):
            logger.warning("ignoring invalid SUGGESTION_CONCURRENCY=%r", raw)
        else:
            if value > 0:
                return value
    return DEFAULT_CONCURRENCY


@dataclass
class SuggestionConfig:
    """
    Suggestion flow settings
    - concurrency: pairs evaluated together per batch
    - search_limit: results requested from the demand source
    """
    concurrency: int = field(default_factory=_env_concurrency)
    search_limit: int = DEFAULT_SEARCH_LIMIT


@dataclass
class RationaleContext:
    """Everything a rationale generator may describe; summary is the templated fallback"""
    male: Animal
    female: Animal
    outcomes: List[Outcome]
    demand: Demand
    risks: List[str]
    goals: List[Goal]
    summary: str


class DemandSource(Protocol):
    async def fetch(self, query: str, limit: int) -> Demand:
        ...


class RationaleGenerator(Protocol):
    async def generate(self, context: RationaleContext) -> str:
        ...


class NullDemandSource:
    """No market data: zero demand, no sources"""

    async def fetch(self, query: str, limit: int) -> Demand:
        return Demand()


class TemplateRationaleGenerator:
    """Returns the templated summary as-is"""

    async def generate(self, context: RationaleContext) -> str:
        return context.summary


def collect_keywords(a: Animal, b: Animal, outcomes: Sequence[Outcome]) -> List[str]:
    keywords: List[str] = []
    for animal in (a, b):
        keywords.extend(m.name for m in animal.morphs)
        keywords.extend(animal.hets)
        keywords.extend(p.label for p in animal.possible_hets)

    for outcome in outcomes[:4]:
        if outcome.labels:
            keywords.append(" ".join(outcome.labels))

    unique: List[str] = []
    for keyword in keywords:
        keyword = keyword.strip()
        if keyword and keyword not in unique:
            unique.append(keyword)
    return unique[:MAX_KEYWORDS]


def build_query(keywords: Sequence[str]) -> str:
    if not keywords:
        return "ball python morph"
    return f"ball python {' '.join(keywords)}".strip()


def best_goal_summary(goals: Sequence[Goal], probabilities: Sequence[float]) -> str:
    if not goals or not probabilities:
        return "No specific goal targets."
    best_index = 0
    for i, prob in enumerate(probabilities):
        if prob > probabilities[best_index]:
            best_index = i
    return (f"{probabilities[best_index] * 100:.1f}% chance to hit goal "
            f"'{goals[best_index].name}'.")


def should_consider_pair(male: Animal, female: Animal, goals: Sequence[Goal]) -> bool:
    return all(prefilter_by_goal(male, female, goal) for goal in goals)


class SuggestionEngine:
    """
    Scores pairings with injected collaborators

    demand_source and rationale_generator may fail; their failures are
    logged and replaced by zero demand and the templated rationale.
    """

    def __init__(
        self,
        demand_source: Optional[DemandSource] = None,
        rationale_generator: Optional[RationaleGenerator] = None,
        config: Optional[SuggestionConfig] = None,
        risk_rules: Optional[Sequence[RiskRule]] = None,
        planner: Optional[MultiGenerationPlanner] = None
    ):
        self.demand_source = demand_source or NullDemandSource()
        self.rationale_generator = rationale_generator or TemplateRationaleGenerator()
        self.config = config or SuggestionConfig()
        self.risk_rules = risk_rules
        self.planner = planner or MultiGenerationPlanner()

    async def _fetch_demand(self, query: str) -> Demand:
        try:
            return await self.demand_source.fetch(query, self.config.search_limit)
        except Exception as e:
            logger.warning("demand lookup failed for %r: %s", query, e)
            return Demand()

    async def _rationale(self, context: RationaleContext) -> str:
        try:
            text = await self.rationale_generator.generate(context)
        except Exception as e:
            logger.warning("rationale generation failed: %s", e)
            return context.summary
        return (text or "").strip() or context.summary

    async def suggest_for_pair(
        self,
        male: Animal,
        female: Animal,
        goals: Sequence[Goal],
        weights: ScoreWeights,
        population: Optional[Population] = None
    ) -> Suggestion:
        goals = list(goals)
        outcomes = GeneticsEngine.cross(male, female)
        demand = await self._fetch_demand(build_query(collect_keywords(male, female, outcomes)))

        pair_label = f"{male.display_label} x {female.display_label}"
        risk = apply_risk_flags(pair_label, outcomes, self.risk_rules)

        probabilities = [prob_goal_for_pair(outcomes, goal) for goal in goals]
        best_prob = max(probabilities) if probabilities else 0.0

        scoring = final_score(outcomes, demand, risk, goals, weights)

        summary = (f"Projected score {scoring.score:.2f} with demand index {demand.index:g}. "
                   f"{best_goal_summary(goals, probabilities)}").strip()
        rationale = await self._rationale(RationaleContext(
            male=male,
            female=female,
            outcomes=outcomes,
            demand=demand,
            risks=list(risk.risks),
            goals=goals,
            summary=summary
        ))

        suggestion = Suggestion(
            male_id=male.id,
            female_id=female.id,
            outcomes=outcomes,
            score=scoring.score,
            demand=demand,
            risks=list(risk.risks),
            sources=list(demand.sources),
            rationale=rationale,
            goal_prob=best_prob,
            goal_fit=scoring.goal_fit
        )
        suggestion.plan = self.planner.build_plan(
            male, female, outcomes, goals, best_prob, population
        )
        return suggestion

    async def _safe_suggest(self, male, female, goals, weights, population) -> Optional[Suggestion]:
        try:
            return await self.suggest_for_pair(male, female, goals, weights, population)
        except Exception:
            logger.exception("pairing %s x %s failed", male.id, female.id)
            return None

    async def suggest_for_collections(
        self,
        males: Sequence[Animal],
        females: Sequence[Animal],
        goals: Sequence[Goal],
        weights: ScoreWeights
    ) -> List[Suggestion]:
        """Every prefiltered (male, female) pair, evaluated in batches, best score first"""
        goals = list(goals)
        candidates = [
            (male, female)
            for male in males
            for female in females
            if should_consider_pair(male, female, goals)
        ]
        logger.info("%d of %d pairings pass the goal prefilter",
                    len(candidates), len(males) * len(females))
        if not candidates:
            return []

        population = Population(males=list(males), females=list(females))
        batch_size = max(1, self.config.concurrency)
        suggestions: List[Suggestion] = []

        for start in range(0, len(candidates), batch_size):
            batch = candidates[start:start + batch_size]
            results = await asyncio.gather(*(
                self._safe_suggest(male, female, goals, weights, population)
                for male, female in batch
            ))
            suggestions.extend(s for s in results if s is not None)

        suggestions.sort(key=lambda s: s.score, reverse=True)
        return suggestions

    def run(
        self,
        males: Sequence[Animal],
        females: Sequence[Animal],
        goals: Sequence[Goal],
        weights: Optional[ScoreWeights] = None
    ) -> List[Suggestion]:
        """Blocking suggest_for_collections for scripts"""
        return asyncio.run(self.suggest_for_collections(
            males, females, goals, weights or ScoreWeights()
        ))


def suggest_for_collections(
    males: Sequence[Animal],
    females: Sequence[Animal],
    goals: Sequence[Goal],
    weights: Optional[ScoreWeights] = None,
    engine: Optional[SuggestionEngine] = None
) -> List[Suggestion]:
    """Blocking entry point for scripts"""
    return (engine or SuggestionEngine()).run(males, females, goals, weights)


def suggest_for_pair(
    male: Animal,
    female: Animal,
    goals: Sequence[Goal],
    weights: Optional[ScoreWeights] = None,
    population: Optional[Population] = None,
    engine: Optional[SuggestionEngine] = None
) -> Suggestion:
    """Blocking entry point for scripts"""
    engine = engine or SuggestionEngine()
    return asyncio.run(engine.suggest_for_pair(
        male, female, goals, weights or ScoreWeights(), population
    ))
