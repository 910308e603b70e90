"""
Alice-test configuration: raw-label lookup tables, message templates, LLM
defaults, and the structured-output schema sent to the model.

All constants used by the classifiers, the eligibility resolver, the
validity-score normalizer and the analysis service are centralized here so
that configuration is separated from logic.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Raw label lookups
# ---------------------------------------------------------------------------

# Keys are compared after strip().lower().  Both the display labels used in
# the prompt and the canonical enum values are accepted, since the model is
# asked for one and ground-truth files were exported with the other.
SUBJECT_MATTER_LABELS: dict[str, str] = {
    "abstract": "abstract",
    "natural phenomenon": "natural_phenomenon",
    "natural_phenomenon": "natural_phenomenon",
    "not abstract/not natural phenomenon": "patentable",
    "patentable": "patentable",
}

INVENTIVE_CONCEPT_LABELS: dict[str, str] = {
    "yes": "inventive",
    "inventive": "inventive",
    "no": "uninventive",
    "uninventive": "uninventive",
    "-": "skipped",
    "skipped": "skipped",
}

# ---------------------------------------------------------------------------
# Message templates
# ---------------------------------------------------------------------------

SUBJECT_MATTER_ERROR_MESSAGE = (
    "Subject matter was identified as {subject_matter} "
    "but cannot determine inventive concept"
)
INCORRECT_DATA_ERROR_MESSAGE = (
    "Model responded with incorrect data. "
    "Subject matter: {subject_matter}, inventive concept: {inventive_concept}"
)
VALIDITY_SCORE_ERROR_MESSAGE = (
    "Model responded with incorrect data. "
    "Validity score: {validity_score}, overall eligibility: {overall_eligibility}"
)

# Returned for every upstream failure; the cause is logged, never surfaced.
GENERIC_ERROR_MESSAGE = "Failed to analyze patent validity."

# ---------------------------------------------------------------------------
# Validity score bounds
# ---------------------------------------------------------------------------

# Eligible claims score at least this; ineligible claims score below it.
ELIGIBLE_SCORE_FLOOR: int = 3
INELIGIBLE_FORCED_SCORE: int = 2

# ---------------------------------------------------------------------------
# LLM defaults (overridden by whatever the rendered prompt carries)
# ---------------------------------------------------------------------------

PROMPT_TEMPLATE_ID = "validity-101-agent"
DEFAULT_MODEL = "gpt-4o"
LLM_TEMPERATURE: float = 0.1
MAX_TOKENS: int = 1200

# Structured-output schema handed to the model invoker.
VALIDITY_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "patent_number": {
            "type": "string",
            "description": "The patent number as inputted by the user",
        },
        "claim_number": {
            "type": "number",
            "description": "The claim number evaluated for the patent, as inputted by the user",
        },
        "subject_matter": {
            "type": "string",
            "enum": ["Abstract", "Natural Phenomenon", "Not Abstract/Not Natural Phenomenon"],
            "description": "The output determined for Alice Step One",
        },
        "inventive_concept": {
            "type": "string",
            "enum": ["No", "Yes", "-"],
            "description": "The output determined for Alice Step Two",
        },
        "validity_score": {
            "type": "number",
            "minimum": 1,
            "maximum": 5,
            "description": "The validity score from 1 to 5 determined for the patent claim",
        },
    },
    "required": [
        "patent_number",
        "claim_number",
        "subject_matter",
        "inventive_concept",
        "validity_score",
    ],
    "additionalProperties": False,
}

# Fields the service requires from the model reply (the echoes are optional).
REQUIRED_RESPONSE_FIELDS: tuple[str, ...] = (
    "subject_matter",
    "inventive_concept",
    "validity_score",
)
