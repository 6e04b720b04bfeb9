"""Tests for core data models."""

import pytest

from morph_engine import (
    AlleleDistribution, Animal, Demand, GeneCategory, Goal, Morph, MultiGenPlan,
    Outcome, PlanStep, PossibleHet, RecessiveState, Sex
)


class TestAlleleDistribution:
    def test_rejects_distribution_not_summing_to_one(self):
        with pytest.raises(ValueError):
            AlleleDistribution(0.5, 0.6, 0.0)

    def test_rejects_negative_mass(self):
        with pytest.raises(ValueError):
            AlleleDistribution(1.2, -0.2, 0.0)

    @pytest.mark.parametrize("dist, level", [
        (AlleleDistribution.double(), 3),
        (AlleleDistribution.single(), 2),
        (AlleleDistribution.carrier(0.66), 1),
        (AlleleDistribution.absent(), 0),
    ])
    def test_level(self, dist, level):
        assert dist.level == level

    def test_from_weights_normalizes(self):
        dist = AlleleDistribution.from_weights(1, 2, 1)
        assert dist.as_tuple() == pytest.approx((0.25, 0.5, 0.25))

    def test_from_weights_rejects_zero_mass(self):
        with pytest.raises(AssertionError):
            AlleleDistribution.from_weights(0, 0, 0)

    def test_carrier_is_clamped(self):
        assert AlleleDistribution.carrier(1.5) == AlleleDistribution.single()
        assert AlleleDistribution.carrier(-1) == AlleleDistribution.absent()


def test_unknown_category_is_rejected():
    with pytest.raises(ValueError):
        GeneCategory("semi-dominant")


def test_possible_het_label():
    assert PossibleHet("Clown", 0.66).label == "66% het Clown"
    assert PossibleHet("Hypo").label == "50% het Hypo"


def test_animal_display_label_and_dict():
    male = Animal(id="m1", sex=Sex.MALE,
                  morphs=(Morph("Pastel", GeneCategory.CO_DOMINANT), Morph("Clown", GeneCategory.RECESSIVE)))
    female = Animal(id="f1", sex=Sex.FEMALE, hets=("Clown",),
                    possible_hets=(PossibleHet("Hypo", 0.66),))

    assert male.display_label == "Male Pastel Clown"
    assert female.display_label == "Female Normal"
    assert female.to_dict() == {
        'id': 'f1',
        'sex': 'F',
        'morphs': [],
        'hets': ['Clown'],
        'possibleHets': ['66% het Hypo'],
    }


def test_outcome_dict_and_key():
    outcome = Outcome(labels=("Clown", "Pastel"), prob=0.25)
    assert outcome.key == "Clown|Pastel"
    assert outcome.to_dict() == {'genotype': ['Clown', 'Pastel'], 'prob': 0.25, 'flags': []}


def test_goal_dict():
    goal = Goal(id="g", name="G", require_all=("Clown",), recessive_state=RecessiveState.POSSIBLE_HET)
    data = goal.to_dict()
    assert data['requireAll'] == ['Clown']
    assert data['recessiveState'] == 'possibleHet'
    assert data['minProb'] is None


def test_plan_dict_uses_camel_case():
    plan = MultiGenPlan(
        strategy="multi",
        steps=[PlanStep(generation=1, title="t", summary="s", male_id="m", female_id="f")],
        cumulative_prob=0.5,
        holdback_traits=["het Clown"],
        holdback_prob=1.0
    )
    data = plan.to_dict()
    assert data['cumulativeProb'] == 0.5
    assert data['holdbackTraits'] == ["het Clown"]
    assert data['steps'][0]['maleId'] == "m"
    assert data['steps'][0]['successProb'] is None


def test_demand_dict():
    assert Demand(index=3, price_band=(100, 200)).to_dict() == {
        'index': 3, 'priceBand': [100, 200], 'signals': [], 'sources': []
    }
