"""
Overall eligibility rule table (Alice Step One × Step Two).

The table is total over the 3 × 3 enum domain; anything outside it (a
classifier returned ``UNKNOWN``, or a caller passed a raw string) falls into
a separate incorrect-data bucket.  Resolution never raises and never logs;
the analysis service decides what to do with an invalid outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .classifiers import InventiveConcept, SubjectMatter
from .config import INCORRECT_DATA_ERROR_MESSAGE, SUBJECT_MATTER_ERROR_MESSAGE


class OverallEligibility(str, Enum):
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"
    INVALID = "invalid"


_SM = SubjectMatter
_IC = InventiveConcept
_OE = OverallEligibility

ELIGIBILITY_RULES = MappingProxyType({
    (_SM.PATENTABLE, _IC.SKIPPED): _OE.ELIGIBLE,
    (_SM.PATENTABLE, _IC.INVENTIVE): _OE.ELIGIBLE,
    (_SM.PATENTABLE, _IC.UNINVENTIVE): _OE.ELIGIBLE,
    (_SM.ABSTRACT, _IC.SKIPPED): _OE.INVALID,
    (_SM.ABSTRACT, _IC.INVENTIVE): _OE.ELIGIBLE,
    (_SM.ABSTRACT, _IC.UNINVENTIVE): _OE.INELIGIBLE,
    (_SM.NATURAL_PHENOMENON, _IC.SKIPPED): _OE.INVALID,
    (_SM.NATURAL_PHENOMENON, _IC.INVENTIVE): _OE.ELIGIBLE,
    (_SM.NATURAL_PHENOMENON, _IC.UNINVENTIVE): _OE.INELIGIBLE,
})


def _label(value) -> str:
    return getattr(value, "value", str(value))


@dataclass(frozen=True)
class EligibilityOutcome:
    """
    Result of one rule-table lookup.

    ``in_table`` is False for pairs the table does not cover; those are
    invalid with the incorrect-data message.  Pairs the table maps to
    ``INVALID`` carry the subject-matter message instead.
    """

    subject_matter: object
    inventive_concept: object
    value: OverallEligibility
    in_table: bool

    @property
    def invalid(self) -> bool:
        return self.value is OverallEligibility.INVALID

    @property
    def error_message(self) -> str | None:
        if not self.invalid:
            return None
        if self.in_table:
            return SUBJECT_MATTER_ERROR_MESSAGE.format(
                subject_matter=_label(self.subject_matter),
            )
        return INCORRECT_DATA_ERROR_MESSAGE.format(
            subject_matter=_label(self.subject_matter),
            inventive_concept=_label(self.inventive_concept),
        )


def resolve_eligibility(subject_matter, inventive_concept) -> EligibilityOutcome:
    """
    Look up the overall eligibility for a classified Step One / Step Two pair.

    Args:
        subject_matter: :class:`SubjectMatter` or ``UNKNOWN``.
        inventive_concept: :class:`InventiveConcept` or ``UNKNOWN``.

    Returns:
        :class:`EligibilityOutcome`; ``value`` is ``INVALID`` for the two
        Step-One-without-Step-Two rows and for every unmapped pair.
    """
    # str-valued enums compare equal to plain strings; only members qualify
    value = None
    if isinstance(subject_matter, SubjectMatter) and isinstance(
        inventive_concept, InventiveConcept
    ):
        value = ELIGIBILITY_RULES.get((subject_matter, inventive_concept))

    return EligibilityOutcome(
        subject_matter=subject_matter,
        inventive_concept=inventive_concept,
        value=value if value is not None else OverallEligibility.INVALID,
        in_table=value is not None,
    )
