"""Tests for outcome validation."""

from morph_engine import Outcome, OutcomeValidator, Sex, cross, validate_outcomes
from morph_engine.validator import ValidationLevel


def test_cross_result_is_valid(make_animal):
    outcomes = cross(make_animal("m", Sex.MALE, hets=["Clown", "Hypo"]),
                     make_animal("f", hets=["Clown"], possible_hets=[("Hypo", 0.66)]))
    report = validate_outcomes(outcomes)

    assert report.is_valid
    assert report.error_count == 0
    assert report.warning_count == 0
    assert report.results[0].level == ValidationLevel.INFO


def test_empty_outcomes_are_invalid():
    report = OutcomeValidator().validate_outcomes([])
    assert not report.is_valid
    assert report.get_errors()[0].message == "Outcome set is empty"


def test_bad_total_is_an_error():
    report = validate_outcomes([Outcome(("Clown",), 0.5), Outcome((), 0.2)])
    assert not report.is_valid
    assert "sum to 0.700000" in report.get_errors()[0].message


def test_probability_out_of_range():
    report = validate_outcomes([Outcome(("Clown",), 1.5), Outcome((), -0.5)])
    assert report.error_count == 2


def test_duplicate_label_sets():
    report = validate_outcomes([Outcome(("A", "B"), 0.5), Outcome(("B", "A"), 0.5)])
    assert not report.is_valid
    assert any("Duplicate" in r.message for r in report.get_errors())
    assert any("not sorted" in r.message for r in report.get_warnings())


def test_ascending_order_is_a_warning():
    report = validate_outcomes([Outcome(("A",), 0.25), Outcome(("B",), 0.75)])
    assert report.is_valid
    assert report.warning_count == 1


def test_report_rendering():
    report = validate_outcomes([Outcome((), 1.0)])
    data = report.to_dict()
    assert data['is_valid'] is True
    assert data['results'][0]['level'] == "INFO"
    assert "Result: valid" in str(report)
