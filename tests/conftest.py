"""Pytest configuration and fixtures for morph engine tests."""

import pytest

from morph_engine import Animal, GeneCategory, Morph, PossibleHet, Sex


def _animal(animal_id="generated", sex=Sex.FEMALE, morphs=(), hets=(), possible_hets=()):
    return Animal(
        id=animal_id,
        sex=sex,
        morphs=tuple(Morph(name, category) for name, category in morphs),
        hets=tuple(hets),
        possible_hets=tuple(
            p if isinstance(p, PossibleHet) else PossibleHet(*p) for p in possible_hets
        ),
    )


@pytest.fixture
def make_animal():
    """Factory for Animal records: morphs are (name, GeneCategory) pairs."""
    return _animal


@pytest.fixture
def find_prob():
    """Probability of the outcome with exactly these labels (0 when absent)."""

    def find(outcomes, labels):
        target = sorted(labels)
        for outcome in outcomes:
            if sorted(outcome.labels) == target:
                return outcome.prob
        return 0.0

    return find


@pytest.fixture
def visual_clown_male():
    return _animal("m-clown", Sex.MALE, morphs=[("Clown", GeneCategory.RECESSIVE)])


@pytest.fixture
def het_clown_female():
    return _animal("f-het", Sex.FEMALE, hets=["Clown"])
