"""Tests for the pairing suggestion flow."""

import asyncio
import logging

import pytest

from morph_engine import (
    Demand, GeneCategory, Goal, RecessiveState, ScoreWeights, Sex,
    SuggestionConfig, SuggestionEngine
)
from morph_engine.models import Source
from morph_engine.planner import MultiGenerationPlanner
from morph_engine.suggestions import (
    best_goal_summary, build_query, collect_keywords, suggest_for_collections,
    suggest_for_pair
)


REC = GeneCategory.RECESSIVE

VISUAL_CLOWN = Goal(id="visual-clown", name="Visual Clown",
                    require_all=("Clown",), recessive_state=RecessiveState.VISUAL)


class FakeDemandSource:
    def __init__(self, demand=None):
        self.demand = demand or Demand(
            index=8,
            price_band=(1000, 3000),
            signals=("steady",),
            sources=(Source("Listing", "https://example.com/clown"),)
        )
        self.queries = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, query, limit):
        self.queries.append((query, limit))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1
        return self.demand


class FailingDemandSource:
    async def fetch(self, query, limit):
        raise ConnectionError("search backend down")


class FakeRationaleGenerator:
    def __init__(self, text="Strong pairing for visual Clowns."):
        self.text = text
        self.contexts = []

    async def generate(self, context):
        self.contexts.append(context)
        return self.text


class FailingRationaleGenerator:
    async def generate(self, context):
        raise RuntimeError("model unavailable")


class ExplodingPlanner(MultiGenerationPlanner):
    def build_plan(self, male, female, outcomes, goals, direct_prob=None, population=None):
        if male.id == "bad":
            raise RuntimeError("planner failure")
        return super().build_plan(male, female, outcomes, goals, direct_prob, population)


@pytest.fixture
def clown_collection(make_animal):
    males = [
        make_animal("m1", Sex.MALE, morphs=[("Clown", REC)]),
        make_animal("m2", Sex.MALE, hets=["Clown"]),
        make_animal("m3", Sex.MALE),
    ]
    females = [
        make_animal("f1", Sex.FEMALE, hets=["Clown"]),
        make_animal("f2", Sex.FEMALE, morphs=[("Clown", REC)]),
    ]
    return males, females


class TestSuggestForPair:
    @pytest.mark.asyncio
    async def test_uses_injected_collaborators(self, visual_clown_male, het_clown_female):
        demand_source = FakeDemandSource()
        rationale = FakeRationaleGenerator()
        engine = SuggestionEngine(demand_source, rationale, SuggestionConfig(concurrency=2, search_limit=4))

        suggestion = await engine.suggest_for_pair(
            visual_clown_male, het_clown_female, [VISUAL_CLOWN], ScoreWeights()
        )

        assert suggestion.male_id == "m-clown"
        assert suggestion.female_id == "f-het"
        assert suggestion.rationale == "Strong pairing for visual Clowns."
        assert suggestion.demand.index == 8
        assert suggestion.sources == [Source("Listing", "https://example.com/clown")]
        assert suggestion.goal_prob == pytest.approx(0.5)
        assert suggestion.goal_fit == pytest.approx(0.5)
        assert suggestion.score == pytest.approx(0.8 + 2000 / 7000 + 1 / 3 + 0.5)
        assert suggestion.plan.strategy == "direct"

        query, limit = demand_source.queries[0]
        assert query.startswith("ball python Clown")
        assert limit == 4

        context = rationale.contexts[0]
        assert context.summary.startswith("Projected score")
        assert "50.0% chance to hit goal 'Visual Clown'." in context.summary

    @pytest.mark.asyncio
    async def test_demand_failure_falls_back_to_zero(self, visual_clown_male, het_clown_female, caplog):
        engine = SuggestionEngine(demand_source=FailingDemandSource())

        with caplog.at_level(logging.WARNING):
            suggestion = await engine.suggest_for_pair(
                visual_clown_male, het_clown_female, [VISUAL_CLOWN], ScoreWeights()
            )

        assert suggestion.demand == Demand()
        assert suggestion.sources == []
        assert suggestion.score == pytest.approx(1 / 3 + 0.5)
        assert any("demand lookup failed" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_rationale_failure_uses_summary(self, visual_clown_male, het_clown_female):
        engine = SuggestionEngine(rationale_generator=FailingRationaleGenerator())
        suggestion = await engine.suggest_for_pair(
            visual_clown_male, het_clown_female, [VISUAL_CLOWN], ScoreWeights()
        )
        assert suggestion.rationale.startswith("Projected score 0.83 with demand index 0.")

    @pytest.mark.asyncio
    async def test_blank_rationale_uses_summary(self, visual_clown_male, het_clown_female):
        engine = SuggestionEngine(rationale_generator=FakeRationaleGenerator("   "))
        suggestion = await engine.suggest_for_pair(
            visual_clown_male, het_clown_female, [], ScoreWeights()
        )
        assert suggestion.rationale.endswith("No specific goal targets.")
        assert suggestion.plan is None

    @pytest.mark.asyncio
    async def test_risky_pair_is_flagged(self, make_animal):
        male = make_animal("m", Sex.MALE, morphs=[("Spider", GeneCategory.DOMINANT)])
        suggestion = await SuggestionEngine().suggest_for_pair(
            male, make_animal("f"), [], ScoreWeights()
        )
        assert suggestion.risks == ["Spider wobble (neurological)"]

    def test_blocking_wrapper(self, visual_clown_male, het_clown_female):
        suggestion = suggest_for_pair(visual_clown_male, het_clown_female, [VISUAL_CLOWN])
        assert suggestion.goal_prob == pytest.approx(0.5)


class TestSuggestForCollections:
    def test_prefilter_and_ordering(self, clown_collection):
        males, females = clown_collection
        suggestions = SuggestionEngine().run(males, females, [VISUAL_CLOWN])

        pairs = [(s.male_id, s.female_id) for s in suggestions]
        assert ("m3", "f1") not in pairs
        assert ("m3", "f2") not in pairs
        assert len(pairs) == 4
        assert pairs[0] == ("m1", "f2")

        scores = [s.score for s in suggestions]
        assert scores == sorted(scores, reverse=True)

    def test_no_candidates(self, make_animal):
        suggestions = SuggestionEngine().run(
            [make_animal("m", Sex.MALE)], [make_animal("f")], [VISUAL_CLOWN]
        )
        assert suggestions == []

    def test_batches_respect_concurrency(self, clown_collection):
        males, females = clown_collection
        source = FakeDemandSource()
        engine = SuggestionEngine(demand_source=source, config=SuggestionConfig(concurrency=2))

        engine.run(males, females, [])

        assert len(source.queries) == 6
        assert source.max_in_flight == 2

    def test_failing_pair_is_dropped(self, make_animal, caplog):
        males = [make_animal("bad", Sex.MALE), make_animal("good", Sex.MALE)]
        engine = SuggestionEngine(planner=ExplodingPlanner())

        goal = Goal(id="clown", name="Clown", require_all=("Clown",))

        with caplog.at_level(logging.ERROR):
            suggestions = engine.run(males, [make_animal("f")], [goal])

        assert [s.male_id for s in suggestions] == ["good"]
        assert any("bad x f failed" in r.getMessage() for r in caplog.records)

    def test_blocking_wrapper(self, clown_collection):
        males, females = clown_collection
        assert len(suggest_for_collections(males, females, [VISUAL_CLOWN])) == 4

    def test_multi_generation_plan_uses_collection(self, make_animal):
        male = make_animal("m", Sex.MALE, morphs=[("Clown", REC)])
        normal = make_animal("f-normal", Sex.FEMALE, hets=["Clown"])
        visual = make_animal("f-visual", Sex.FEMALE, morphs=[("Clown", REC)])
        goal = Goal(id="clown", name="Clown", require_all=("Clown",), min_prob=0.9)

        engine = SuggestionEngine(planner=MultiGenerationPlanner(direct_threshold=0.75))
        suggestions = engine.run([male], [normal, visual], [goal])
        by_female = {s.female_id: s for s in suggestions}

        assert by_female["f-visual"].plan.strategy == "direct"
        assert by_female["f-normal"].plan.strategy == "multi"
        assert by_female["f-normal"].plan.steps[1].female_id == "f-visual"


class TestConfig:
    def test_default_concurrency(self, monkeypatch):
        monkeypatch.delenv("SUGGESTION_CONCURRENCY", raising=False)
        assert SuggestionConfig().concurrency == 3

    def test_concurrency_from_environment(self, monkeypatch):
        monkeypatch.setenv("SUGGESTION_CONCURRENCY", "5")
        assert SuggestionConfig().concurrency == 5

    @pytest.mark.parametrize("raw", ["abc", "0", "-2"])
    def test_invalid_environment_value_is_ignored(self, monkeypatch, raw):
        monkeypatch.setenv("SUGGESTION_CONCURRENCY", raw)
        assert SuggestionConfig().concurrency == 3


class TestHelpers:
    def test_collect_keywords(self, make_animal):
        male = make_animal("m", Sex.MALE, morphs=[("Pastel", GeneCategory.CO_DOMINANT)], hets=["Clown"])
        female = make_animal("f", possible_hets=[("Hypo", 0.66)])
        keywords = collect_keywords(male, female, [])
        assert keywords == ["Pastel", "Clown", "66% het Hypo"]

    def test_keywords_are_unique_and_capped(self, make_animal):
        male = make_animal("m", Sex.MALE, hets=["A", "B", "C", "D"])
        female = make_animal("f", hets=["A", "E", "F", "G"])
        assert collect_keywords(male, female, []) == ["A", "B", "C", "D", "E", "F"]

    def test_build_query(self):
        assert build_query([]) == "ball python morph"
        assert build_query(["Clown", "Pastel"]) == "ball python Clown Pastel"

    def test_best_goal_summary(self):
        goals = [VISUAL_CLOWN, Goal(id="other", name="Other")]
        assert best_goal_summary(goals, [0.25, 0.5]) == "50.0% chance to hit goal 'Other'."
        assert best_goal_summary([], []) == "No specific goal targets."


def test_overflowing_concurrency_is_ignored(monkeypatch, caplog):
    monkeypatch.setenv("SUGGESTION_CONCURRENCY", "inf")
    with caplog.at_level(logging.WARNING):
        assert SuggestionConfig().concurrency == 3
    assert any("SUGGESTION_CONCURRENCY" in r.getMessage() for r in caplog.records)
