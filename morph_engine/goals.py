"""
goals.py - goal matcher
Checks outcomes and parent records against breeding goals
"""

import re
from typing import List, Sequence

from .genetics import canonical_gene_label, gene_key
from .models import Animal, Goal, Outcome, RecessiveState


_HET_PREFIX_RE = re.compile(r"^(?:possible het|pos het|het)\s+", re.IGNORECASE)


GOAL_PRESETS: List[Goal] = [
    Goal(
        id="visual-clown",
        name="Make Visual Clown",
        require_all=("Clown",),
        recessive_state=RecessiveState.VISUAL,
        min_prob=0.125,
        weight=2.0
    ),
    Goal(
        id="dg-het-hypo",
        name="Make DG het Hypo",
        require_all=("Desert Ghost", "het Hypo"),
        min_prob=0.25,
        weight=1.0
    ),
]


def _normalize(value: str) -> str:
    return re.sub(r"\s+", " ", value or "").strip().lower()


def _is_het_label(normalized: str) -> bool:
    return bool(_HET_PREFIX_RE.match(normalized))


def strip_het_prefix(label: str) -> str:
    """'het Clown' -> 'Clown'"""
    return _HET_PREFIX_RE.sub("", (label or "").strip()).strip()


def trait_matches(label: str, target: str) -> bool:
    """
    Case-insensitive substring match of a goal token against one label

    A carrier label ('het X', 'possible het X') only matches tokens that
    ask for a carrier themselves.
    """
    normalized_label = _normalize(label)
    normalized_target = _normalize(target)
    if not normalized_target:
        return False
    if normalized_label == normalized_target:
        return True
    if _is_het_label(normalized_label) and not _is_het_label(normalized_target):
        return False
    return normalized_target in normalized_label


def _avoid_matches(label: str, trait: str) -> bool:
    normalized_trait = _normalize(trait)
    return bool(normalized_trait) and normalized_trait in _normalize(label)


def expand_aliases(token: str, goal: Goal) -> List[str]:
    """Plain trait names also stand for their Super form and, for carrier goals, their het forms"""
    trimmed = (token or "").strip()
    if not trimmed:
        return []

    aliases = [trimmed]
    if "het " not in trimmed.lower():
        aliases.append(f"Super {trimmed}")
        if goal.recessive_state in (RecessiveState.HET, RecessiveState.POSSIBLE_HET):
            aliases.append(f"het {trimmed}")
            aliases.append(f"possible het {trimmed}")
    return aliases


def _phenotype_matches(labels: Sequence[str], token: str, goal: Goal) -> bool:
    return any(
        trait_matches(label, alias)
        for alias in expand_aliases(token, goal)
        for label in labels
    )


def matches_goal(labels: Sequence[str], goal: Goal) -> bool:
    """Whether one outcome's label set satisfies the goal"""
    labels = labels or ()

    # plain substring, so "het Clown" fails an avoided Clown and "Super Spider" an avoided Spider
    if any(_avoid_matches(label, trait) for trait in goal.avoid for label in labels):
        return False

    if goal.require_all:
        if not all(_phenotype_matches(labels, token, goal) for token in goal.require_all):
            return False

    if goal.require_any:
        if not any(_phenotype_matches(labels, token, goal) for token in goal.require_any):
            return False

    return True


def prob_goal_for_pair(outcomes: Sequence[Outcome], goal: Goal) -> float:
    """Total probability of outcomes that satisfy the goal"""
    return sum(o.prob for o in outcomes if matches_goal(o.labels, goal))


def goal_score_for_pair(outcomes: Sequence[Outcome], goals: Sequence[Goal]) -> float:
    """Weighted sum of goal probabilities; goals under their min_prob count zero"""
    score = 0.0
    for goal in goals:
        probability = prob_goal_for_pair(outcomes, goal)
        if goal.min_prob and probability < goal.min_prob:
            continue
        score += probability * goal.weight
    return score


def has_visual_trait(animal: Animal, trait: str) -> bool:
    return any(trait_matches(m.name, trait) for m in animal.morphs)


def carries_allele(animal: Animal, gene: str) -> bool:
    """At least one (possible) copy: visual, certain het or possible het"""
    if has_visual_trait(animal, gene):
        return True
    target = gene_key(canonical_gene_label(gene))
    if not target:
        return False
    declared = list(animal.hets) + [p.name for p in animal.possible_hets]
    return any(target in gene_key(canonical_gene_label(name)) for name in declared)


def prefilter_by_goal(a: Animal, b: Animal, goal: Goal) -> bool:
    """
    Cheap rejection of pairings that cannot reach the goal

    Rejects when either parent visually shows an avoided trait, or when a
    visual goal requires a trait one of the parents has no copy of.
    """
    if goal.avoid:
        if any(has_visual_trait(a, t) or has_visual_trait(b, t) for t in goal.avoid):
            return False

    if goal.recessive_state == RecessiveState.VISUAL and goal.require_all:
        for label in goal.require_all:
            base = strip_het_prefix(label)
            if not base:
                continue
            if not (carries_allele(a, base) and carries_allele(b, base)):
                return False

    return True
