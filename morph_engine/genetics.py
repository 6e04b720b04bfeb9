"""
genetics.py - gene model and cross engine
Builds per-parent allele distributions and combines them into offspring outcomes
"""

import logging
import re
from functools import reduce
from typing import List, Dict, Optional, Tuple, Iterable

import numpy as np

from .models import (
    EPSILON, CATEGORY_PRIORITY,
    AlleleDistribution, Animal, GeneBundle, GeneCategory,
    Outcome, ParentGeneRecord
)


logger = logging.getLogger(__name__)

# probability that a gamete carries the mutant allele, by parent copy count
GAMETE_MUTANT_PROB = np.array([0.0, 0.5, 1.0])

_QUALIFIER_RE = re.compile(r"\b(?:possible|pos|probable|het|ph|carrier)\b", re.IGNORECASE)
_PERCENT_RE = re.compile(r"\d+(?:\.\d+)?\s*%")
_PARENS_RE = re.compile(r"\(([^)]*)\)")
_SUPER_RE = re.compile(r"^super\s+", re.IGNORECASE)


def canonical_gene_label(raw: str) -> str:
    """
    Canonical display label for a gene declaration

    '66% het clown' -> 'Clown', 'axanthic (VPI)' -> 'Axanthic VPI'
    """
    original = (raw or "").strip()
    if not original:
        return ""

    value = _PARENS_RE.sub(r" \1 ", original)
    value = _QUALIFIER_RE.sub("", value)
    value = _PERCENT_RE.sub("", value)
    value = re.sub(r"\s+", " ", value).strip()
    if not value:
        value = re.sub(r"\s+", " ", original)

    words = []
    for word in value.split(" "):
        if len(word) <= 2:
            words.append(word.upper())
        elif word.isalpha() and word.isupper():
            words.append(word)
        else:
            words.append(word[0].upper() + word[1:].lower())
    return " ".join(words)


def gene_key(label: str) -> str:
    """Grouping key for a canonical label"""
    return re.sub(r"\s+", " ", label.strip().lower())


def parse_percentage(label: str) -> Optional[float]:
    """Carrier probability embedded in a label ('66% het Clown' -> 0.66)"""
    match = re.search(r"(\d+(?:\.\d+)?)\s*%", label or "")
    if not match:
        return None
    return max(0.0, min(1.0, float(match.group(1)) / 100))


def merge_gene_record(
    existing: Optional[ParentGeneRecord],
    incoming: ParentGeneRecord
) -> ParentGeneRecord:
    """
    Resolve two declarations of the same gene on one animal

    The higher confidence level wins; two probabilistic declarations are
    combined as independent chances of carrying the allele.
    """
    if existing is None:
        return incoming

    distribution = existing.distribution
    if incoming.level > existing.level:
        distribution = incoming.distribution
    elif incoming.level == existing.level == 1:
        combined = 1 - (1 - existing.distribution.p1) * (1 - incoming.distribution.p1)
        distribution = AlleleDistribution.carrier(combined)

    category = max(
        (existing.category, incoming.category),
        key=lambda c: CATEGORY_PRIORITY[c]
    )

    return ParentGeneRecord(
        gene=existing.gene,
        category=category,
        distribution=distribution,
        level=distribution.level
    )


class GeneModel:
    """Extracts one animal's gene declarations into parent gene records"""

    @staticmethod
    def declarations(animal: Animal) -> Iterable[Tuple[str, GeneCategory, AlleleDistribution]]:
        """(gene name, category, distribution) for every declaration on the animal"""
        for morph in animal.morphs:
            name = morph.name.strip()
            if not name:
                continue

            if morph.category == GeneCategory.RECESSIVE:
                yield name, GeneCategory.RECESSIVE, AlleleDistribution.double()
            elif morph.category == GeneCategory.CO_DOMINANT:
                if _SUPER_RE.match(name):
                    stripped = _SUPER_RE.sub("", name).strip()
                    yield stripped, GeneCategory.CO_DOMINANT, AlleleDistribution.double()
                else:
                    yield name, GeneCategory.CO_DOMINANT, AlleleDistribution.single()
            else:
                # no double dose distinction for dominant / polygenic
                yield name, morph.category, AlleleDistribution.single()

        for het in animal.hets:
            if het and het.strip():
                yield het, GeneCategory.RECESSIVE, AlleleDistribution.single()

        for possible in animal.possible_hets:
            if possible.name and possible.name.strip():
                yield (possible.name, GeneCategory.RECESSIVE,
                       AlleleDistribution.carrier(possible.probability))

    @staticmethod
    def gather(animal: Animal) -> Dict[str, ParentGeneRecord]:
        """Canonical gene key -> resolved record"""

        def fold(genes: Dict[str, ParentGeneRecord], declaration) -> Dict[str, ParentGeneRecord]:
            name, category, distribution = declaration
            label = canonical_gene_label(name)
            key = gene_key(label)
            record = ParentGeneRecord(
                gene=label,
                category=category,
                distribution=distribution,
                level=distribution.level
            )
            merged = dict(genes)
            merged[key] = merge_gene_record(genes.get(key), record)
            return merged

        return reduce(fold, GeneModel.declarations(animal), {})


class GeneticsEngine:
    """Probabilistic cross engine"""

    @staticmethod
    def child_distribution(
        parent_a: AlleleDistribution,
        parent_b: AlleleDistribution
    ) -> AlleleDistribution:
        """
        Offspring allele count distribution for one gene

        Sums over the 9 (copy count A, copy count B) combinations, each child
        receiving one independent gamete from either parent.
        """
        a = np.array(parent_a.as_tuple())
        b = np.array(parent_b.as_tuple())
        a[a <= EPSILON] = 0.0
        b[b <= EPSILON] = 0.0

        weights = np.outer(a, b)
        ga = GAMETE_MUTANT_PROB[:, np.newaxis]
        gb = GAMETE_MUTANT_PROB[np.newaxis, :]

        p2 = float(np.sum(weights * ga * gb))
        p1 = float(np.sum(weights * (ga * (1 - gb) + (1 - ga) * gb)))
        p0 = float(np.sum(weights * (1 - ga) * (1 - gb)))

        return AlleleDistribution.from_weights(p0, p1, p2)

    @staticmethod
    def phenotype_options(
        gene: str,
        category: GeneCategory,
        distribution: AlleleDistribution
    ) -> List[Tuple[List[str], float]]:
        """(labels, probability) contributions of one gene's child distribution"""
        if category == GeneCategory.RECESSIVE:
            candidates = [
                ([gene], distribution.p2),
                ([f"het {gene}"], distribution.p1),
                ([], distribution.p0),
            ]
        elif category == GeneCategory.CO_DOMINANT:
            candidates = [
                ([f"Super {gene}"], distribution.p2),
                ([gene], distribution.p1),
                ([], distribution.p0),
            ]
        else:
            candidates = [
                ([gene], distribution.p1 + distribution.p2),
                ([], distribution.p0),
            ]

        options = [(labels, prob) for labels, prob in candidates if prob > EPSILON]
        return options or [([], 1.0)]

    @staticmethod
    def build_gene_bundles(a: Animal, b: Animal) -> List[GeneBundle]:
        """Pair up both parents' records for every gene either one declares"""
        genes_a = GeneModel.gather(a)
        genes_b = GeneModel.gather(b)

        keys = list(genes_a)
        keys.extend(k for k in genes_b if k not in genes_a)

        bundles = []
        for key in keys:
            record_a = genes_a.get(key)
            record_b = genes_b.get(key)
            declared = [r for r in (record_a, record_b) if r is not None]

            bundles.append(GeneBundle(
                gene=declared[0].gene,
                category=max((r.category for r in declared),
                             key=lambda c: CATEGORY_PRIORITY[c]),
                parent_a=record_a.distribution if record_a else AlleleDistribution.absent(),
                parent_b=record_b.distribution if record_b else AlleleDistribution.absent()
            ))
        return bundles

    @staticmethod
    def combine_gene_outcomes(bundles: List[GeneBundle]) -> List[Outcome]:
        """Cartesian product of every gene's phenotype options, aggregated by label set"""
        combined: List[Tuple[List[str], float]] = [([], 1.0)]

        for bundle in bundles:
            distribution = GeneticsEngine.child_distribution(bundle.parent_a, bundle.parent_b)
            options = GeneticsEngine.phenotype_options(bundle.gene, bundle.category, distribution)

            expanded = []
            for labels, prob in options:
                for current_labels, current_prob in combined:
                    joint = current_prob * prob
                    if joint <= EPSILON:
                        continue
                    expanded.append((current_labels + labels, joint))
            if expanded:
                combined = expanded

        aggregated: Dict[Tuple[str, ...], float] = {}
        for labels, prob in combined:
            key = tuple(sorted(labels, key=lambda s: (s.lower(), s)))
            aggregated[key] = aggregated.get(key, 0.0) + prob

        aggregated = {k: p for k, p in aggregated.items() if p > EPSILON}

        total = sum(aggregated.values())
        if total > EPSILON and abs(total - 1.0) > EPSILON:
            logger.debug("renormalizing outcome total %.8f", total)
            aggregated = {k: p / total for k, p in aggregated.items()}

        outcomes = [Outcome(labels=k, prob=p) for k, p in aggregated.items()]
        outcomes.sort(key=lambda o: o.prob, reverse=True)

        if not outcomes:
            return [Outcome(labels=(), prob=1.0)]
        return outcomes

    @staticmethod
    def cross(a: Animal, b: Animal) -> List[Outcome]:
        """Full offspring outcome distribution for a x b"""
        bundles = GeneticsEngine.build_gene_bundles(a, b)
        if not bundles:
            return [Outcome(labels=(), prob=1.0)]

        outcomes = GeneticsEngine.combine_gene_outcomes(bundles)
        logger.debug("cross %s x %s: %d genes, %d outcomes",
                     a.id, b.id, len(bundles), len(outcomes))
        return outcomes


def cross(a: Animal, b: Animal) -> List[Outcome]:
    """Shortcut for GeneticsEngine.cross"""
    return GeneticsEngine.cross(a, b)
