"""
src/alice — Alice-test eligibility engine.

Module layout
-------------
config.py          — label lookups, message templates, LLM defaults, schema
classifiers.py     — Step One / Step Two label classification, UNKNOWN sentinel
eligibility.py     — 3 × 3 overall eligibility rule table
validity_score.py  — score / eligibility reconciliation
service.py         — single-claim analysis orchestration (AnalysisResult)

Public interface
----------------
Analyze one claim:
    ValidityAnalysisService(invoker).analyze(patent_number, claim_number, claim_text, abstract)

Use the rules directly:
    resolve_eligibility(classify_subject_matter(raw_sm), classify_inventive_concept(raw_ic))
    normalize_validity_score(raw_score, eligibility)
"""

from .classifiers import (
    UNKNOWN,
    InventiveConcept,
    SubjectMatter,
    classify_inventive_concept,
    classify_subject_matter,
    forced_inventive_concept,
)
from .eligibility import (
    ELIGIBILITY_RULES,
    EligibilityOutcome,
    OverallEligibility,
    resolve_eligibility,
)
from .service import AnalysisResult, ValidityAnalysisService
from .validity_score import ScoreOutcome, normalize_validity_score

__all__ = [
    # Classification
    "SubjectMatter",
    "InventiveConcept",
    "UNKNOWN",
    "classify_subject_matter",
    "classify_inventive_concept",
    "forced_inventive_concept",
    # Rules
    "OverallEligibility",
    "EligibilityOutcome",
    "ELIGIBILITY_RULES",
    "resolve_eligibility",
    "ScoreOutcome",
    "normalize_validity_score",
    # Orchestration
    "AnalysisResult",
    "ValidityAnalysisService",
]
