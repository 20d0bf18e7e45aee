"""
Validation Module

Coerces and checks (date, value) series before compute.

Exports:
    - prepare_series: Align dates/values and compute date order
    - PreparedSeries: The aligned view engines consume
    - validate_series: Report on (or strictly reject) malformed input
    - ValidationError: Raised by strict validation
    - InputValidationReport: Counts, errors and warnings
"""

from .series import (
    as_dates,
    as_values,
    day_numbers,
    prepare_series,
    PreparedSeries,
)

from .input_validation import (
    validate_series,
    ValidationError,
    InputValidationReport,
)

__all__ = [
    # Series coercion
    'as_dates',
    'as_values',
    'day_numbers',
    'prepare_series',
    'PreparedSeries',
    # Validation
    'validate_series',
    'ValidationError',
    'InputValidationReport',
]
