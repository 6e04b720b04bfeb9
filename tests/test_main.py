"""Tests for the command line entry point."""

import json

import pytest

from main import main


COLLECTION = {
    "males": [{"id": "m1", "sex": "M", "morphs": [{"name": "Clown", "type": "recessive"}]}],
    "females": [
        {"id": "f1", "sex": "F", "hets": ["Clown"]},
        {"id": "f2", "sex": "F", "morphs": [{"name": "Spider", "type": "dominant"}]},
    ],
    "goals": [{"id": "visual-clown", "requireAll": ["Clown"], "recessiveState": "visual"}],
}


@pytest.fixture
def collection_path(tmp_path):
    path = tmp_path / "collection.json"
    path.write_text(json.dumps(COLLECTION), encoding="utf-8")
    return str(path)


def test_cross_json(collection_path, capsys):
    assert main(["--json", "cross", collection_path, "--male", "m1", "--female", "f1"]) == 0

    result = json.loads(capsys.readouterr().out)
    assert result['success'] is True
    assert result['goals'][0]['probability'] == pytest.approx(0.5)


def test_cross_table(collection_path, capsys):
    assert main(["cross", collection_path, "--male", "m1", "--female", "f1"]) == 0
    out = capsys.readouterr().out
    assert "| het Clown | 50.00% |" in out


def test_cross_chart(collection_path, tmp_path):
    chart = tmp_path / "chart.png"
    assert main(["cross", collection_path, "--male", "m1", "--female", "f1",
                 "--chart", str(chart)]) == 0
    assert chart.exists()


def test_suggest_json(collection_path, capsys):
    assert main(["--json", "suggest", collection_path, "--top", "3", "--concurrency", "1"]) == 0

    suggestions = json.loads(capsys.readouterr().out)['suggestions']
    assert [(s['maleId'], s['femaleId']) for s in suggestions] == [("m1", "f1")]


def test_presets_are_added(collection_path, capsys):
    assert main(["--json", "--presets", "cross", collection_path, "--male", "m1", "--female", "f1"]) == 0
    goal_ids = [g['id'] for g in json.loads(capsys.readouterr().out)['goals']]
    assert goal_ids == ["visual-clown", "visual-clown", "dg-het-hypo"]


def test_custom_risk_rules(collection_path, tmp_path, capsys):
    rules = tmp_path / "rules.json"
    rules.write_text(json.dumps({"risk_rules": [
        {"pattern": "Clown", "flag": "test flag", "penalty": 0.1}
    ]}), encoding="utf-8")

    assert main(["--json", "--risk-rules", str(rules), "suggest", collection_path]) == 0
    suggestion = json.loads(capsys.readouterr().out)['suggestions'][0]
    assert suggestion['risks'] == ["test flag"]


def test_unknown_animal(collection_path, capsys):
    assert main(["cross", collection_path, "--male", "m1", "--female", "nope"]) == 1
    assert "no animal with id 'nope'" in capsys.readouterr().err


def test_missing_file(tmp_path):
    assert main(["suggest", str(tmp_path / "missing.json")]) == 1


def test_malformed_risk_rules_exit_cleanly(collection_path, tmp_path, capsys):
    rules = tmp_path / "rules.json"
    rules.write_text(json.dumps({"risk_rules": [{"pattern": "Clown"}]}), encoding="utf-8")

    assert main(["--risk-rules", str(rules), "suggest", collection_path]) == 1
    assert "invalid risk rule #0" in capsys.readouterr().err
