"""
Grade an analysis result against ground truth.

Strategies
----------
exact_match — trimmed, case-insensitive equality.  When both sides are
              structured, subject_matter, inventive_concept and
              overall_eligibility must all match.  Step One / Step Two
              display labels ("Abstract", "No", "-") equal their
              canonical values ("abstract", "uninventive", "skipped").
contains    — expected is a case-insensitive substring of actual.
regex       — the configured pattern matches actual (case-insensitive);
              no pattern or an unparseable one fails.
(other)     — treated as exact_match.

Structured values are mappings, or strings holding a JSON object.  When
only one side is structured, its overall_eligibility is compared with the
other side's scalar (the legacy ground-truth format).  Missing fields
normalize to ``""``.  No function here raises on bad input.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass

EXACT_MATCH = "exact_match"
CONTAINS = "contains"
REGEX = "regex"

STRATEGIES: frozenset[str] = frozenset({EXACT_MATCH, CONTAINS, REGEX})

GRADED_FIELDS: tuple[str, ...] = ("subject_matter", "inventive_concept", "overall_eligibility")
SCALAR_FIELD = "overall_eligibility"


# ---------------------------------------------------------------------------
# Normalization helpers
# ---------------------------------------------------------------------------

def normalize_value(value) -> str:
    """Lowercase, trimmed string form; ``None`` becomes ``""``."""
    if value is None:
        return ""
    value = getattr(value, "value", value)  # enum members
    return str(value).strip().lower()


def as_structured(value) -> Mapping | None:
    """
    Return ``value`` as a mapping if it is one or is a JSON-object string,
    else ``None``.
    """
    if isinstance(value, Mapping):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("{"):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                return None
            if isinstance(parsed, dict):
                return parsed
    return None


def canonical_field_value(name: str, value) -> str:
    """
    Normalized form of one graded field.

    Step One / Step Two labels are classified first, so the display labels
    (``"Not Abstract/Not Natural Phenomenon"``, ``"No"``, ``"-"``) and the
    canonical values (``"patentable"``, ``"uninventive"``, ``"skipped"``)
    compare equal.  Labels that do not classify fall back to
    :func:`normalize_value`.
    """
    # Imported here: src.alice.service imports this module.
    from src.alice.classifiers import classify_inventive_concept, classify_subject_matter

    classifiers = {
        "subject_matter": classify_subject_matter,
        "inventive_concept": classify_inventive_concept,
    }
    classify = classifiers.get(name)
    if classify is not None and value is not None:
        label = classify(getattr(value, "value", value))
        if label:
            return label.value
    return normalize_value(value)


def as_scalar(value) -> str:
    """Normalized scalar form; mappings contribute their overall_eligibility."""
    structured = as_structured(value)
    if structured is not None:
        return normalize_value(structured.get(SCALAR_FIELD))
    return normalize_value(value)


# ---------------------------------------------------------------------------
# Field comparison
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldComparison:
    field: str
    actual: str
    expected: str

    @property
    def matched(self) -> bool:
        return self.actual == self.expected

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "actual": self.actual,
            "expected": self.expected,
            "matched": self.matched,
        }


def compare_fields(actual, expected, fields=GRADED_FIELDS) -> list[FieldComparison]:
    """
    Compare the graded fields of two structured values one by one.

    Step One / Step Two labels are compared in canonical form (see
    :func:`canonical_field_value`).

    Non-structured inputs are treated as empty mappings, so every field
    normalizes to ``""`` on that side.
    """
    actual_map = as_structured(actual) or {}
    expected_map = as_structured(expected) or {}
    return [
        FieldComparison(
            field=name,
            actual=canonical_field_value(name, actual_map.get(name)),
            expected=canonical_field_value(name, expected_map.get(name)),
        )
        for name in fields
    ]


def field_differences(actual, expected, fields=GRADED_FIELDS) -> list[dict]:
    """Only the mismatching fields from :func:`compare_fields`, as dicts."""
    return [
        comparison.to_dict()
        for comparison in compare_fields(actual, expected, fields)
        if not comparison.matched
    ]


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def exact_match(actual, expected) -> bool:
    actual_map = as_structured(actual)
    expected_map = as_structured(expected)
    if actual_map is not None and expected_map is not None:
        return all(c.matched for c in compare_fields(actual_map, expected_map))
    return as_scalar(actual) == as_scalar(expected)


def contains(actual, expected) -> bool:
    return as_scalar(expected) in as_scalar(actual)


def regex_match(actual, pattern: str | None) -> bool:
    if not pattern:
        return False
    try:
        return re.search(pattern, as_scalar(actual), re.IGNORECASE) is not None
    except re.error:
        return False


def grade(actual, expected, strategy: str = EXACT_MATCH, pattern: str | None = None) -> bool:
    """
    Decide pass/fail for one result.

    Args:
        actual: Produced output (mapping, JSON string, or scalar).
        expected: Ground truth (same shapes).
        strategy: ``'exact_match'``, ``'contains'`` or ``'regex'``; anything
            else falls back to ``'exact_match'``.
        pattern: Regular expression used by the ``'regex'`` strategy.

    Returns:
        ``True`` when the result passes.
    """
    if strategy == CONTAINS:
        return contains(actual, expected)
    if strategy == REGEX:
        return regex_match(actual, pattern)
    return exact_match(actual, expected)
