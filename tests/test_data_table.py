"""Tests for outcome tables and charts."""

import base64

from morph_engine import (
    ChartConfig, Goal, Outcome, OutcomeTableGenerator, OutcomeVisualizer, RecessiveState,
    goal_highlights
)


OUTCOMES = [
    Outcome(labels=("het Clown",), prob=0.5),
    Outcome(labels=("Clown",), prob=0.25),
    Outcome(labels=(), prob=0.25),
]


def test_table_rows():
    table = OutcomeTableGenerator().generate_table(OUTCOMES)

    assert [row.display for row in table.rows] == ["het Clown", "Clown", "Normal"]
    assert table.rows[0].percent == "50.00%"
    assert table.hidden_prob == 0.0
    assert table.to_dict()[2] == {'phenotype': 'Normal', 'labels': [], 'prob': 0.25, 'percent': '25.00%'}


def test_limit_summarizes_remaining_rows():
    table = OutcomeTableGenerator().generate_table(OUTCOMES, limit=1, title="het x het")

    assert table.title == "het x het"
    assert len(table.rows) == 1
    assert table.hidden_prob == 0.5
    assert table.to_markdown().splitlines() == [
        "| Phenotype | Probability |",
        "|---|---|",
        "| het Clown | 50.00% |",
        "| (other) | 50.00% |",
    ]


def test_empty_table_renders_nothing():
    assert OutcomeTableGenerator().generate_table([]).to_markdown() == ""


def test_chart_is_base64_png(tmp_path):
    path = tmp_path / "chart.png"
    visualizer = OutcomeVisualizer(ChartConfig(max_rows=2))

    encoded = visualizer.create_chart(OUTCOMES, title="het x het",
                                      highlight=[False, True], save_path=str(path))

    assert base64.b64decode(encoded).startswith(b"\x89PNG")
    assert path.exists()


def test_goal_highlights():
    goal = Goal(id="v", name="v", require_all=("Clown",), recessive_state=RecessiveState.VISUAL)
    assert goal_highlights(OUTCOMES, [goal]) == [False, True, False]
    assert goal_highlights(OUTCOMES, []) is None
