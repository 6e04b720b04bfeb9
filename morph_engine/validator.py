"""
validator.py - outcome validation module
Checks that a cross result is a well-formed probability distribution
"""

from typing import List, Dict, Sequence
from dataclasses import dataclass, field
from enum import Enum

from .models import Outcome


SUM_TOLERANCE = 1e-5


class ValidationLevel(Enum):
    """Validation level"""
    ERROR = "ERROR"      # broken invariant
    WARNING = "WARNING"  # unusual but usable
    INFO = "INFO"


@dataclass
class ValidationResult:
    """Single validation result"""
    is_valid: bool
    level: ValidationLevel
    message: str
    details: Dict = field(default_factory=dict)

    def __str__(self):
        return f"[{self.level.value}] {self.message}"


@dataclass
class ValidationReport:
    """Full validation report"""
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Valid when no error failed"""
        return not any(
            r.level == ValidationLevel.ERROR and not r.is_valid
            for r in self.results
        )

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results
                   if r.level == ValidationLevel.ERROR and not r.is_valid)

    @property
    def warning_count(self) -> int:
        return sum(1 for r in self.results
                   if r.level == ValidationLevel.WARNING and not r.is_valid)

    def add_result(self, result: ValidationResult):
        self.results.append(result)

    def get_errors(self) -> List[ValidationResult]:
        return [r for r in self.results
                if r.level == ValidationLevel.ERROR and not r.is_valid]

    def get_warnings(self) -> List[ValidationResult]:
        return [r for r in self.results
                if r.level == ValidationLevel.WARNING and not r.is_valid]

    def to_dict(self) -> Dict:
        return {
            'is_valid': self.is_valid,
            'error_count': self.error_count,
            'warning_count': self.warning_count,
            'results': [
                {
                    'valid': r.is_valid,
                    'level': r.level.value,
                    'message': r.message,
                    'details': r.details
                }
                for r in self.results
            ]
        }

    def __str__(self):
        lines = [
            "=== Validation report ===",
            f"Result: {'valid' if self.is_valid else 'INVALID'}",
            f"Errors: {self.error_count}, warnings: {self.warning_count}",
            ""
        ]

        if self.results:
            lines.append("Details:")
            for r in self.results:
                status = "ok" if r.is_valid else "FAIL"
                lines.append(f"  {status} [{r.level.value}] {r.message}")

        return "\n".join(lines)


class OutcomeValidator:
    """
    Outcome set validation

    Checks:
    1. every probability lies in [0, 1]
    2. probabilities sum to 1
    3. label sets are sorted and distinct
    4. outcomes are ordered by descending probability
    """

    def validate_outcomes(self, outcomes: Sequence[Outcome]) -> ValidationReport:
        report = ValidationReport()

        if not outcomes:
            report.add_result(ValidationResult(
                is_valid=False,
                level=ValidationLevel.ERROR,
                message="Outcome set is empty"
            ))
            return report

        for r in self._validate_probabilities(outcomes):
            report.add_result(r)
        for r in self._validate_labels(outcomes):
            report.add_result(r)
        for r in self._validate_order(outcomes):
            report.add_result(r)

        return report

    def _validate_probabilities(self, outcomes: Sequence[Outcome]) -> List[ValidationResult]:
        results = []

        for outcome in outcomes:
            if not 0.0 <= outcome.prob <= 1.0 + SUM_TOLERANCE:
                results.append(ValidationResult(
                    is_valid=False,
                    level=ValidationLevel.ERROR,
                    message=f"Probability out of range for [{outcome.key}]: {outcome.prob}",
                    details={'labels': list(outcome.labels), 'prob': outcome.prob}
                ))

        total = sum(o.prob for o in outcomes)
        if abs(total - 1.0) > SUM_TOLERANCE:
            results.append(ValidationResult(
                is_valid=False,
                level=ValidationLevel.ERROR,
                message=f"Probabilities sum to {total:.6f}, expected 1",
                details={'total': total}
            ))
        else:
            results.append(ValidationResult(
                is_valid=True,
                level=ValidationLevel.INFO,
                message=f"Probabilities sum to 1 across {len(outcomes)} outcomes"
            ))

        return results

    def _validate_labels(self, outcomes: Sequence[Outcome]) -> List[ValidationResult]:
        results = []
        seen = set()

        for outcome in outcomes:
            canonical = tuple(sorted(outcome.labels, key=lambda s: (s.lower(), s)))
            if canonical != tuple(outcome.labels):
                results.append(ValidationResult(
                    is_valid=False,
                    level=ValidationLevel.WARNING,
                    message=f"Labels not sorted: [{outcome.key}]",
                    details={'labels': list(outcome.labels)}
                ))
            if canonical in seen:
                results.append(ValidationResult(
                    is_valid=False,
                    level=ValidationLevel.ERROR,
                    message=f"Duplicate label set: [{outcome.key}]",
                    details={'labels': list(outcome.labels)}
                ))
            seen.add(canonical)

        return results

    def _validate_order(self, outcomes: Sequence[Outcome]) -> List[ValidationResult]:
        for previous, current in zip(outcomes, outcomes[1:]):
            if current.prob > previous.prob + 1e-12:
                return [ValidationResult(
                    is_valid=False,
                    level=ValidationLevel.WARNING,
                    message="Outcomes are not in descending probability order",
                    details={'before': previous.key, 'after': current.key}
                )]
        return []


def validate_outcomes(outcomes: Sequence[Outcome]) -> ValidationReport:
    """
    Convenience function: validate one cross result

    Args:
        outcomes: outcome list returned by the cross engine

    Returns:
        ValidationReport
    """
    validator = OutcomeValidator()
    return validator.validate_outcomes(outcomes)
