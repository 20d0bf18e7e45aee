"""
Input Data Validation

Opt-in checks for callers that want strict input before running engines.
The engines themselves never raise on degenerate data; they degrade to NaN
and empty results. This module is for the ingestion side that wants to know.

Usage:
    from driftline.validation import validate_series

    report = validate_series(dates, values)
    print(report.summary())

    # Raise instead of reporting
    validate_series(dates, values, strict=True)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from driftline.validation.series import as_dates, as_values, day_numbers


class ValidationError(Exception):
    """Raised when strict input validation fails."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []

        message = "Input validation failed:\n" + "\n".join(
            f"  ERROR: {e}" for e in errors
        )
        if warnings:
            message += "\n" + "\n".join(f"  WARNING: {w}" for w in warnings)

        super().__init__(message)


@dataclass
class InputValidationReport:
    """Report from series validation."""

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    # Counts
    total_points: int = 0
    finite_values: int = 0
    missing_values: int = 0
    invalid_dates: int = 0
    duplicate_dates: int = 0
    is_sorted: bool = True

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            "=" * 60,
            "SERIES VALIDATION REPORT",
            "=" * 60,
            "",
            f"Total points: {self.total_points:,}",
            f"  Finite values: {self.finite_values:,}",
            f"  Missing values: {self.missing_values:,}",
            f"  Invalid dates: {self.invalid_dates:,}",
            f"  Duplicate dates: {self.duplicate_dates:,}",
            f"Sorted by date: {'yes' if self.is_sorted else 'no'}",
            "",
        ]

        if self.errors:
            lines.append("ERRORS:")
            for e in self.errors:
                lines.append(f"  - {e}")
            lines.append("")

        if self.warnings:
            lines.append("WARNINGS:")
            for w in self.warnings:
                lines.append(f"  - {w}")
            lines.append("")

        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Status: {status}")
        lines.append("=" * 60)

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict."""
        return {
            'valid': self.valid,
            'errors': self.errors,
            'warnings': self.warnings,
            'total_points': self.total_points,
            'finite_values': self.finite_values,
            'missing_values': self.missing_values,
            'invalid_dates': self.invalid_dates,
            'duplicate_dates': self.duplicate_dates,
            'is_sorted': self.is_sorted,
        }


def validate_series(dates, values, strict: bool = False) -> InputValidationReport:
    """
    Check a (date, value) series.

    Errors: dates and values of different length, dates that cannot be
    parsed. Warnings: missing values, repeated calendar days, unsorted input.

    Args:
        dates: Date-likes
        values: Numeric values
        strict: Raise ValidationError when errors were found

    Returns:
        InputValidationReport
    """
    report = InputValidationReport()

    d = as_dates(dates)
    v = as_values(values)

    if len(d) != len(v):
        report.errors.append(
            f"dates and values differ in length ({len(d)} vs {len(v)})"
        )

    n = min(len(d), len(v))
    d, v = d[:n], v[:n]

    report.total_points = n
    report.finite_values = int(np.sum(np.isfinite(v)))
    report.missing_values = n - report.finite_values

    nat = np.isnat(d)
    report.invalid_dates = int(nat.sum())
    if report.invalid_dates:
        report.errors.append(f"{report.invalid_dates} date(s) could not be parsed")

    days = day_numbers(d[~nat])
    report.duplicate_dates = int(len(days) - len(np.unique(days)))
    report.is_sorted = bool(np.all(np.diff(days) >= 0))

    if report.missing_values:
        report.warnings.append(f"{report.missing_values} missing or non-finite value(s)")
    if report.duplicate_dates:
        report.warnings.append(f"{report.duplicate_dates} repeated calendar day(s)")
    if not report.is_sorted:
        report.warnings.append("dates are not in ascending order")

    report.valid = not report.errors

    if strict and report.errors:
        raise ValidationError(report.errors, report.warnings)

    return report
