"""
Unit tests for src/alice/classifiers.py.

Covers:
- classify_subject_matter / classify_inventive_concept: display labels,
  canonical values, whitespace and case handling, unknown labels.
- UNKNOWN sentinel behaviour.
- forced_inventive_concept: Step Two discarded for patentable claims.
"""

from __future__ import annotations

import pytest

from src.alice.classifiers import (
    UNKNOWN,
    InventiveConcept,
    SubjectMatter,
    classify_inventive_concept,
    classify_subject_matter,
    forced_inventive_concept,
)


class TestClassifySubjectMatter:

    @pytest.mark.parametrize("raw, expected", [
        ("Abstract", SubjectMatter.ABSTRACT),
        ("Natural Phenomenon", SubjectMatter.NATURAL_PHENOMENON),
        ("Not Abstract/Not Natural Phenomenon", SubjectMatter.PATENTABLE),
        ("patentable", SubjectMatter.PATENTABLE),
        ("natural_phenomenon", SubjectMatter.NATURAL_PHENOMENON),
    ])
    def test_known_labels(self, raw, expected):
        assert classify_subject_matter(raw) is expected

    def test_case_and_whitespace_insensitive(self):
        assert classify_subject_matter("  ABSTRACT \n") is SubjectMatter.ABSTRACT

    @pytest.mark.parametrize("raw", ["Concrete", "", None, 3, "Abstract idea"])
    def test_unknown_labels(self, raw):
        assert classify_subject_matter(raw) is UNKNOWN


class TestClassifyInventiveConcept:

    @pytest.mark.parametrize("raw, expected", [
        ("Yes", InventiveConcept.INVENTIVE),
        ("No", InventiveConcept.UNINVENTIVE),
        ("-", InventiveConcept.SKIPPED),
        ("uninventive", InventiveConcept.UNINVENTIVE),
        (" yes ", InventiveConcept.INVENTIVE),
    ])
    def test_known_labels(self, raw, expected):
        assert classify_inventive_concept(raw) is expected

    @pytest.mark.parametrize("raw", ["Maybe", "", None, True])
    def test_unknown_labels(self, raw):
        assert classify_inventive_concept(raw) is UNKNOWN


class TestUnknownSentinel:

    def test_is_falsy_and_not_an_enum_member(self):
        assert not UNKNOWN
        assert UNKNOWN not in list(SubjectMatter)
        assert UNKNOWN not in list(InventiveConcept)

    def test_string_forms(self):
        assert str(UNKNOWN) == "unknown"
        assert repr(UNKNOWN) == "UNKNOWN"


class TestForcedInventiveConcept:

    @pytest.mark.parametrize("ic", list(InventiveConcept))
    def test_patentable_always_skipped(self, ic):
        assert forced_inventive_concept(SubjectMatter.PATENTABLE, ic) is InventiveConcept.SKIPPED

    @pytest.mark.parametrize("sm", [SubjectMatter.ABSTRACT, SubjectMatter.NATURAL_PHENOMENON])
    @pytest.mark.parametrize("ic", list(InventiveConcept))
    def test_other_subject_matter_unchanged(self, sm, ic):
        assert forced_inventive_concept(sm, ic) is ic
