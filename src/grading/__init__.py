"""
src/grading — pass/fail comparison of analysis results against ground truth.

Public interface
----------------
    grade(actual, expected, strategy="exact_match", pattern=None)
    compare_fields(actual, expected)
    field_differences(actual, expected)
"""

from .engine import (
    CONTAINS,
    EXACT_MATCH,
    GRADED_FIELDS,
    REGEX,
    STRATEGIES,
    FieldComparison,
    as_structured,
    canonical_field_value,
    compare_fields,
    field_differences,
    grade,
)

__all__ = [
    "grade",
    "compare_fields",
    "field_differences",
    "as_structured",
    "canonical_field_value",
    "FieldComparison",
    "GRADED_FIELDS",
    "STRATEGIES",
    "EXACT_MATCH",
    "CONTAINS",
    "REGEX",
]
