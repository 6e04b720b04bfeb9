"""
planner.py - multi-generation planner
Searches for a holdback-based two step plan when a direct pairing rarely reaches a goal
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .genetics import GeneModel, GeneticsEngine, gene_key
from .goals import prob_goal_for_pair
from .models import (
    Animal, GeneCategory, Goal, Morph, MultiGenPlan,
    Outcome, PlanStep, PossibleHet, Sex
)


logger = logging.getLogger(__name__)

DIRECT_THRESHOLD = 0.25
CANDIDATE_LIMIT = 8
CANDIDATE_MIN_PROB = 0.01

_PREFIX_RE = re.compile(r"^(?:het|possible het|pos het)\s+", re.IGNORECASE)
_VISUAL_RE = re.compile(r"^visual\s+", re.IGNORECASE)
_SUPER_RE = re.compile(r"^super\s+", re.IGNORECASE)


@dataclass
class Population:
    """Every candidate parent available for a second generation pairing"""
    males: List[Animal] = field(default_factory=list)
    females: List[Animal] = field(default_factory=list)


@dataclass
class CandidateAssessment:
    outcome: Outcome
    score: int
    visual_matches: int
    het_matches: int


@dataclass
class SecondStep:
    prob: float
    partner_id: str
    holdback_sex: Sex
    outcomes: List[Outcome]


@dataclass
class HoldbackPair:
    male: Animal
    female: Animal
    traits: List[str]


def _normalize(value: str) -> str:
    return re.sub(r"\s+", " ", value or "").strip().lower()


def clean_trait(value: str) -> str:
    """Strip het / possible het / visual / Super qualifiers"""
    value = _PREFIX_RE.sub("", (value or "").strip())
    value = _VISUAL_RE.sub("", value)
    value = _SUPER_RE.sub("", value)
    return value.strip()


def gather_target_traits(goals: Sequence[Goal]) -> List[str]:
    traits: List[str] = []
    for goal in goals:
        for label in goal.require_all:
            cleaned = clean_trait(label)
            if cleaned and cleaned not in traits:
                traits.append(cleaned)
    return traits


def best_goal_probability(outcomes: Sequence[Outcome], goals: Sequence[Goal]) -> float:
    if not goals:
        return 0.0
    return max(prob_goal_for_pair(outcomes, goal) for goal in goals)


def evaluate_outcome_for_traits(
    labels: Sequence[str],
    target_traits: Sequence[str]
) -> Tuple[int, int, int]:
    """(score, visual matches, het matches); visual counts 2, het counts 1"""
    tokens = [_normalize(t) for t in labels]
    visual_matches = 0
    het_matches = 0

    for trait in target_traits:
        normalized = _normalize(trait)
        visual = any(
            normalized in token
            for token in tokens
            if not (token.startswith("het ") or token.startswith("possible het "))
        )
        if visual:
            visual_matches += 1
            continue

        het = any(
            normalized in _PREFIX_RE.sub("", token)
            for token in tokens
            if token.startswith("het ") or token.startswith("possible het ")
        )
        if het:
            het_matches += 1

    return visual_matches * 2 + het_matches, visual_matches, het_matches


def select_candidate(
    outcomes: Sequence[Outcome],
    target_traits: Sequence[str]
) -> Optional[CandidateAssessment]:
    """Best holdback outcome among the top outcomes; ties go to the more likely one"""
    candidates = [o for o in outcomes[:CANDIDATE_LIMIT] if o.prob > CANDIDATE_MIN_PROB]
    best: Optional[CandidateAssessment] = None

    for outcome in candidates:
        score, visual, het = evaluate_outcome_for_traits(outcome.labels, target_traits)
        if score <= 0:
            continue
        if (best is None or score > best.score or
                (score == best.score and outcome.prob > best.outcome.prob)):
            best = CandidateAssessment(outcome, score, visual, het)

    return best


def build_holdback_animals(
    labels: Sequence[str],
    pair_label: str,
    categories: Dict[str, GeneCategory]
) -> HoldbackPair:
    """
    Synthetic male and female holdbacks carrying the outcome's exact genetics

    Plain labels take their category from the parents' gene records.
    """
    morphs: List[Morph] = []
    hets: List[str] = []
    possible_hets: List[PossibleHet] = []
    display: List[str] = []

    for token in labels:
        trimmed = token.strip()
        if not trimmed:
            continue
        normalized = _normalize(trimmed)

        if normalized.startswith("possible het"):
            gene = clean_trait(trimmed)
            if gene:
                possible_hets.append(PossibleHet(name=gene))
                display.append(f"possible het {gene}")
        elif normalized.startswith("het "):
            gene = clean_trait(trimmed)
            if gene:
                hets.append(gene)
                display.append(f"het {gene}")
        elif _SUPER_RE.match(trimmed):
            morphs.append(Morph(name=trimmed, category=GeneCategory.CO_DOMINANT))
            display.append(trimmed)
        else:
            category = categories.get(gene_key(trimmed), GeneCategory.RECESSIVE)
            morphs.append(Morph(name=trimmed, category=category))
            display.append(trimmed)

    def make(suffix: str, sex: Sex) -> Animal:
        return Animal(
            id=f"{pair_label}-holdback-{suffix}",
            sex=sex,
            morphs=tuple(morphs),
            hets=tuple(hets),
            possible_hets=tuple(possible_hets)
        )

    return HoldbackPair(male=make("m", Sex.MALE), female=make("f", Sex.FEMALE), traits=display)


class MultiGenerationPlanner:
    """
    Direct-or-holdback planner

    Below DIRECT_THRESHOLD the planner picks the most promising offspring
    of the direct cross as a holdback and pairs it against the population.
    It never raises for missing data; it falls back to a direct plan.
    """

    def __init__(self, direct_threshold: float = DIRECT_THRESHOLD):
        self.direct_threshold = direct_threshold

    def build_plan(
        self,
        male: Animal,
        female: Animal,
        outcomes: Sequence[Outcome],
        goals: Sequence[Goal],
        direct_prob: Optional[float] = None,
        population: Optional[Population] = None
    ) -> Optional[MultiGenPlan]:
        if not goals:
            return None

        target_traits = gather_target_traits(goals)
        if not target_traits:
            return None

        if direct_prob is None:
            direct_prob = best_goal_probability(outcomes, goals)
        direct_prob = max(direct_prob, 0.0)

        if direct_prob > 0:
            summary = f"Direct chance to reach the goal is {direct_prob * 100:.1f}%."
        else:
            summary = (f"No direct visual expected; produce holdbacks carrying "
                       f"{', '.join(target_traits)}.")

        first = PlanStep(
            generation=1,
            title=f"Generation 1: {male.id} × {female.id}",
            summary=summary,
            male_id=male.id,
            female_id=female.id,
            focus_traits=list(target_traits),
            success_prob=direct_prob
        )

        def direct_plan(**extra) -> MultiGenPlan:
            return MultiGenPlan(strategy="direct", steps=[first],
                                cumulative_prob=direct_prob, **extra)

        if population is None or direct_prob >= self.direct_threshold:
            return direct_plan()

        candidate = select_candidate(list(outcomes), target_traits)
        if candidate is None:
            logger.debug("%s x %s: no holdback candidate", male.id, female.id)
            return direct_plan()

        categories = {}
        for parent in (male, female):
            for key, record in GeneModel.gather(parent).items():
                categories.setdefault(key, record.category)

        holdback = build_holdback_animals(
            candidate.outcome.labels, f"{male.id}-{female.id}", categories
        )
        holdback_traits = [
            token for token in holdback.traits
            if clean_trait(token) and any(
                _normalize(trait) in _normalize(clean_trait(token)) for trait in target_traits
            )
        ]

        second = self._search_second_step(male, female, holdback, goals, population)
        if second is None:
            return direct_plan(holdback_traits=holdback_traits,
                               holdback_prob=candidate.outcome.prob)

        holdback_label = ", ".join(holdback_traits or target_traits)
        first.summary = (f"Direct goal chance {direct_prob * 100:.1f}%. "
                         f"Prioritise producing holdbacks carrying {holdback_label}.")

        if second.holdback_sex == Sex.FEMALE:
            male_id, female_id = second.partner_id, holdback.female.id
        else:
            male_id, female_id = holdback.male.id, second.partner_id

        sex_word = "female" if second.holdback_sex == Sex.FEMALE else "male"
        steps = [first, PlanStep(
            generation=2,
            title=f"Generation 2: Holdback × {second.partner_id}",
            summary=(f"Retain the {sex_word} holdback ({holdback_label}). "
                     f"Pair with {second.partner_id} for {second.prob * 100:.1f}% chance at the goal."),
            male_id=male_id,
            female_id=female_id,
            focus_traits=list(target_traits),
            success_prob=second.prob,
            prerequisite_prob=candidate.outcome.prob
        )]

        return MultiGenPlan(
            strategy="multi",
            steps=steps,
            cumulative_prob=candidate.outcome.prob * second.prob,
            holdback_traits=holdback_traits,
            holdback_prob=candidate.outcome.prob
        )

    @staticmethod
    def _search_second_step(
        male: Animal,
        female: Animal,
        holdback: HoldbackPair,
        goals: Sequence[Goal],
        population: Population
    ) -> Optional[SecondStep]:
        """Best holdback x partner cross; population order decides exact ties (first wins)"""
        best: Optional[SecondStep] = None

        for partner in population.males or []:
            if partner.id == male.id:
                continue
            outcomes = GeneticsEngine.cross(partner, holdback.female)
            prob = best_goal_probability(outcomes, goals)
            if prob > 0 and (best is None or prob > best.prob):
                best = SecondStep(prob, partner.id, Sex.FEMALE, outcomes)

        for partner in population.females or []:
            if partner.id == female.id:
                continue
            outcomes = GeneticsEngine.cross(holdback.male, partner)
            prob = best_goal_probability(outcomes, goals)
            if prob > 0 and (best is None or prob > best.prob):
                best = SecondStep(prob, partner.id, Sex.MALE, outcomes)

        return best


def build_multi_generation_plan(
    male: Animal,
    female: Animal,
    outcomes: Sequence[Outcome],
    goals: Sequence[Goal],
    direct_prob: Optional[float] = None,
    population: Optional[Population] = None
) -> Optional[MultiGenPlan]:
    """Convenience wrapper around MultiGenerationPlanner.build_plan"""
    return MultiGenerationPlanner().build_plan(
        male, female, outcomes, goals, direct_prob, population
    )
