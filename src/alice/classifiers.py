"""
Alice Step One / Step Two label classification.

Both classifiers are pure and total: a label outside the fixed lookup comes
back as the :data:`UNKNOWN` sentinel rather than raising or defaulting, and
the eligibility resolver routes the sentinel to its incorrect-data bucket.
"""

from __future__ import annotations

from enum import Enum

from .config import INVENTIVE_CONCEPT_LABELS, SUBJECT_MATTER_LABELS


class SubjectMatter(str, Enum):
    """Alice Step One outcome."""

    ABSTRACT = "abstract"
    NATURAL_PHENOMENON = "natural_phenomenon"
    PATENTABLE = "patentable"


class InventiveConcept(str, Enum):
    """Alice Step Two outcome."""

    INVENTIVE = "inventive"
    UNINVENTIVE = "uninventive"
    SKIPPED = "skipped"


class _UnknownLabel:
    """Marker for a raw label that is not in the lookup table."""

    __slots__ = ()
    value = "unknown"

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __str__(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return False


UNKNOWN = _UnknownLabel()


def _lookup_key(raw_label) -> str | None:
    if raw_label is None:
        return None
    return str(raw_label).strip().lower()


def classify_subject_matter(raw_label) -> SubjectMatter | _UnknownLabel:
    """
    Map a raw model label to a :class:`SubjectMatter`.

    Args:
        raw_label: Label from the model reply, e.g. ``'Abstract'`` or
            ``'Not Abstract/Not Natural Phenomenon'``.  Any type is accepted.

    Returns:
        The matching enum member, or :data:`UNKNOWN`.
    """
    value = SUBJECT_MATTER_LABELS.get(_lookup_key(raw_label))
    return SubjectMatter(value) if value else UNKNOWN


def classify_inventive_concept(raw_label) -> InventiveConcept | _UnknownLabel:
    """
    Map a raw model label (``'Yes'``, ``'No'``, ``'-'``) to an
    :class:`InventiveConcept`, or :data:`UNKNOWN`.
    """
    value = INVENTIVE_CONCEPT_LABELS.get(_lookup_key(raw_label))
    return InventiveConcept(value) if value else UNKNOWN


def forced_inventive_concept(subject_matter, inventive_concept):
    """
    Discard the Step Two answer when Step One already found the claim
    patentable.

    Returns ``InventiveConcept.SKIPPED`` for ``SubjectMatter.PATENTABLE``
    regardless of ``inventive_concept``; otherwise returns it unchanged.
    """
    if subject_matter is SubjectMatter.PATENTABLE:
        return InventiveConcept.SKIPPED
    return inventive_concept
