"""
scoring.py - pairing scorer and rule-based risk flags
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .goals import goal_score_for_pair
from .models import Demand, Goal, Outcome, RiskResult, ScoreWeights
from .normalize import InputError


logger = logging.getLogger(__name__)

PRICE_SATURATION = 5000.0


@dataclass(frozen=True)
class RiskRule:
    """Flag a pairing whose label contains the pattern"""
    pattern: str
    flag: str
    penalty: float = 0.0


@dataclass(frozen=True)
class FinalScore:
    score: float
    goal_fit: float


DEFAULT_RISK_RULES: List[RiskRule] = [
    RiskRule("Spider", "Spider wobble (neurological)", 0.3),
    RiskRule("Champagne", "Champagne head wobble", 0.25),
    RiskRule("Hidden Gene Woma", "HGW neurological issues", 0.2),
    RiskRule("Woma", "Woma line wobble", 0.1),
    RiskRule("Super Sable", "Super Sable eye defects", 0.3),
    RiskRule("Super Spider", "Super Spider lethal", 0.5),
    RiskRule("Desert Ghost", "Desert Ghost female fertility issues", 0.1),
    RiskRule("Caramel", "Caramel Albino kinking reported", 0.15),
]


def load_risk_rules(path: str) -> List[RiskRule]:
    """Read {"risk_rules": [{"pattern", "flag", "penalty"}]} from a JSON file"""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise InputError(f"{path}: expected an object with a 'risk_rules' list")

    rules = []
    for i, entry in enumerate(data.get('risk_rules', [])):
        try:
            rules.append(RiskRule(
                pattern=entry['pattern'],
                flag=entry['flag'],
                penalty=float(entry.get('penalty') or 0.0)
            ))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise InputError(f"{path}: invalid risk rule #{i}: {e!r}")
    logger.debug("loaded %d risk rules from %s", len(rules), path)
    return rules


def apply_risk_flags(
    pair_label: str,
    outcomes: Sequence[Outcome] = (),
    rules: Optional[Sequence[RiskRule]] = None
) -> RiskResult:
    """Unique flags and a penalty clamped to [0, 1] for every rule matching the pair label"""
    if rules is None:
        rules = DEFAULT_RISK_RULES

    normalized_pair = (pair_label or "").strip().lower()
    flags: List[str] = []
    penalty = 0.0

    if normalized_pair:
        for rule in rules:
            if rule.pattern.strip().lower() in normalized_pair:
                if rule.flag not in flags:
                    flags.append(rule.flag)
                penalty += rule.penalty

    return RiskResult(risks=tuple(flags), penalty=clamp01(penalty))


def clamp01(value: float) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


def demand_score(demand: Optional[Demand]) -> float:
    if demand is None:
        return 0.0
    return clamp01(demand.index / 10)


def price_score(demand: Optional[Demand]) -> float:
    """avg / (avg + 5000) over the price band"""
    if demand is None or not demand.price_band:
        return 0.0

    values = [v for v in demand.price_band if v is not None]
    if not values:
        return 0.0
    average = sum(values) / len(values)
    if average <= 0:
        return 0.0
    return clamp01(average / (average + PRICE_SATURATION))


def novelty_score(outcomes: Sequence[Outcome]) -> float:
    """More distinct visible outcomes score higher, saturating at 4"""
    if not outcomes:
        return 0.0
    distinct = {"|".join(sorted(o.labels)) for o in outcomes}
    return clamp01((len(distinct) - 1) / 3)


def base_score(
    outcomes: Sequence[Outcome],
    demand: Optional[Demand],
    risks: Optional[RiskResult],
    weights: ScoreWeights
) -> float:
    penalty = risks.penalty if risks else 0.0
    total = (
        weights.demand * demand_score(demand)
        + weights.price * price_score(demand)
        + weights.novelty * novelty_score(outcomes)
        - weights.risk * penalty
    )
    return max(0.0, total)


def final_score(
    outcomes: Sequence[Outcome],
    demand: Optional[Demand],
    risks: Optional[RiskResult],
    goals: Sequence[Goal],
    weights: ScoreWeights
) -> FinalScore:
    """Base score plus weighted goal fit, floored at 0"""
    base = base_score(outcomes, demand, risks, weights)
    goal_fit = goal_score_for_pair(outcomes, goals) if goals else 0.0
    total = base + weights.goal_fit * goal_fit
    return FinalScore(score=max(0.0, total), goal_fit=goal_fit)
