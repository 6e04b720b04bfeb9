"""
models.py - core data models
Animal, Goal, Outcome, AlleleDistribution and breeding plan records
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Tuple, Any


EPSILON = 1e-6


class GeneCategory(Enum):
    """Inheritance category of a gene"""
    RECESSIVE = "recessive"
    CO_DOMINANT = "co-dominant"
    DOMINANT = "dominant"
    POLYGENIC = "polygenic"


# recessive wins, then co-dominant over dominant
CATEGORY_PRIORITY = {
    GeneCategory.RECESSIVE: 3,
    GeneCategory.CO_DOMINANT: 2,
    GeneCategory.DOMINANT: 1,
    GeneCategory.POLYGENIC: 0,
}


class Sex(Enum):
    MALE = "M"
    FEMALE = "F"


class RecessiveState(Enum):
    """Which recessive state a goal is aiming for"""
    VISUAL = "visual"
    HET = "het"
    POSSIBLE_HET = "possibleHet"


@dataclass(frozen=True)
class AlleleDistribution:
    """
    Probability mass over the number of mutant allele copies (0, 1, 2)
    a parent carries for one gene.
    """
    p0: float = 1.0
    p1: float = 0.0
    p2: float = 0.0

    def __post_init__(self):
        if min(self.p0, self.p1, self.p2) < -EPSILON:
            raise ValueError(f"negative probability in {self}")
        if abs(self.total - 1.0) > EPSILON:
            raise ValueError(f"distribution does not sum to 1: {self}")

    @property
    def total(self) -> float:
        return self.p0 + self.p1 + self.p2

    @property
    def level(self) -> int:
        """
        Confidence rank of the declaration
        3: guaranteed double copy / visual
        2: guaranteed single copy
        1: probabilistic single copy
        0: no allele
        """
        if abs(self.p2 - 1.0) < EPSILON:
            return 3
        if abs(self.p1 - 1.0) < EPSILON:
            return 2
        if self.p1 > EPSILON:
            return 1
        return 0

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.p0, self.p1, self.p2)

    @classmethod
    def from_weights(cls, p0: float, p1: float, p2: float) -> 'AlleleDistribution':
        """Build a distribution from unnormalized weights"""
        total = p0 + p1 + p2
        assert total > EPSILON, "cannot normalize an all-zero allele distribution"
        return cls(p0 / total, p1 / total, p2 / total)

    @classmethod
    def absent(cls) -> 'AlleleDistribution':
        return cls(1.0, 0.0, 0.0)

    @classmethod
    def single(cls) -> 'AlleleDistribution':
        return cls(0.0, 1.0, 0.0)

    @classmethod
    def double(cls) -> 'AlleleDistribution':
        return cls(0.0, 0.0, 1.0)

    @classmethod
    def carrier(cls, probability: float) -> 'AlleleDistribution':
        probability = max(0.0, min(1.0, probability))
        return cls(1.0 - probability, probability, 0.0)


@dataclass(frozen=True)
class ParentGeneRecord:
    """
    One parent's resolved state for one gene
    - gene: canonical gene label (e.g. 'Clown')
    - category: inheritance category
    - distribution: allele count distribution
    - level: confidence rank of the declaration that produced it
    """
    gene: str
    category: GeneCategory
    distribution: AlleleDistribution
    level: int


@dataclass(frozen=True)
class Morph:
    """An expressed (visual) morph on an animal"""
    name: str
    category: GeneCategory


@dataclass(frozen=True)
class PossibleHet:
    """A possible-het declaration with its carrier probability"""
    name: str
    probability: float = 0.5

    @property
    def label(self) -> str:
        return f"{round(self.probability * 100)}% het {self.name}"


@dataclass(frozen=True)
class Animal:
    """
    A candidate parent
    - morphs: expressed morphs
    - hets: certain het gene names
    - possible_hets: possible het declarations
    """
    id: str
    sex: Sex
    morphs: Tuple[Morph, ...] = ()
    hets: Tuple[str, ...] = ()
    possible_hets: Tuple[PossibleHet, ...] = ()

    @property
    def display_label(self) -> str:
        morphs = " ".join(m.name for m in self.morphs) or "Normal"
        return f"{'Male' if self.sex == Sex.MALE else 'Female'} {morphs}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'sex': self.sex.value,
            'morphs': [{'name': m.name, 'type': m.category.value} for m in self.morphs],
            'hets': list(self.hets),
            'possibleHets': [p.label for p in self.possible_hets],
        }


@dataclass(frozen=True)
class GeneBundle:
    """Both parents' distributions for one gene"""
    gene: str
    category: GeneCategory
    parent_a: AlleleDistribution
    parent_b: AlleleDistribution


@dataclass(frozen=True)
class Outcome:
    """One offspring phenotype combination and its probability"""
    labels: Tuple[str, ...]
    prob: float
    flags: Tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return "|".join(self.labels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'genotype': list(self.labels),
            'prob': self.prob,
            'flags': list(self.flags),
        }


@dataclass(frozen=True)
class Goal:
    """
    A breeding goal
    - require_all: every token must match an outcome label
    - require_any: at least one token must match
    - avoid: any match fails the outcome
    - min_prob: goal contributes nothing to the score below this probability
    """
    id: str
    name: str
    require_all: Tuple[str, ...] = ()
    require_any: Tuple[str, ...] = ()
    avoid: Tuple[str, ...] = ()
    recessive_state: Optional[RecessiveState] = None
    min_prob: Optional[float] = None
    weight: float = 1.0
    min_offspring_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'requireAll': list(self.require_all),
            'requireAny': list(self.require_any),
            'avoid': list(self.avoid),
            'recessiveState': self.recessive_state.value if self.recessive_state else None,
            'minProb': self.min_prob,
            'weight': self.weight,
        }


@dataclass
class PlanStep:
    """One generation of a breeding plan"""
    generation: int
    title: str
    summary: str
    male_id: Optional[str] = None
    female_id: Optional[str] = None
    focus_traits: List[str] = field(default_factory=list)
    success_prob: Optional[float] = None
    prerequisite_prob: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'generation': self.generation,
            'title': self.title,
            'summary': self.summary,
            'maleId': self.male_id,
            'femaleId': self.female_id,
            'focusTraits': list(self.focus_traits),
            'successProb': self.success_prob,
            'prerequisiteProb': self.prerequisite_prob,
        }


@dataclass
class MultiGenPlan:
    """Direct or two-generation breeding plan"""
    strategy: str
    steps: List[PlanStep]
    cumulative_prob: float
    holdback_traits: Optional[List[str]] = None
    holdback_prob: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'strategy': self.strategy,
            'steps': [s.to_dict() for s in self.steps],
            'cumulativeProb': self.cumulative_prob,
            'holdbackTraits': self.holdback_traits,
            'holdbackProb': self.holdback_prob,
        }


@dataclass(frozen=True)
class Source:
    title: str
    url: str


@dataclass(frozen=True)
class Demand:
    """Market demand record supplied by a demand source"""
    index: float = 0.0
    price_band: Optional[Tuple[float, float]] = None
    signals: Tuple[str, ...] = ()
    sources: Tuple[Source, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'priceBand': list(self.price_band) if self.price_band else None,
            'signals': list(self.signals),
            'sources': [{'title': s.title, 'url': s.url} for s in self.sources],
        }


@dataclass(frozen=True)
class RiskResult:
    risks: Tuple[str, ...] = ()
    penalty: float = 0.0


@dataclass(frozen=True)
class ScoreWeights:
    """Weights applied by the pairing scorer"""
    demand: float = 1.0
    price: float = 1.0
    novelty: float = 1.0
    risk: float = 1.0
    goal_fit: float = 1.0

    def __post_init__(self):
        for name in ('demand', 'price', 'novelty', 'risk', 'goal_fit'):
            if getattr(self, name) < 0:
                raise ValueError(f"weight '{name}' must be non-negative")


@dataclass
class Suggestion:
    """A scored pairing"""
    male_id: str
    female_id: str
    outcomes: List[Outcome]
    score: float
    demand: Demand
    risks: List[str]
    sources: List[Source]
    rationale: str
    goal_prob: float = 0.0
    goal_fit: float = 0.0
    plan: Optional[MultiGenPlan] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'maleId': self.male_id,
            'femaleId': self.female_id,
            'outcomes': [o.to_dict() for o in self.outcomes],
            'score': self.score,
            'demand': self.demand.to_dict(),
            'risks': list(self.risks),
            'sources': [{'title': s.title, 'url': s.url} for s in self.sources],
            'rationale': self.rationale,
            'goalProb': self.goal_prob,
            'goalFit': self.goal_fit,
            'plan': self.plan.to_dict() if self.plan else None,
        }
