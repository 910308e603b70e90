"""
Single-claim validity analysis: render → invoke model → classify → resolve
eligibility → normalize score → force Step Two.

The service is the error boundary for one analysis.  A rule violation in
the Step One / Step Two pair short-circuits to an error result carrying the
resolver's message; any exception from rendering, the model call or reply
parsing becomes an error result with :data:`GENERIC_ERROR_MESSAGE` and is
logged with its traceback.  A score violation is logged and the forced
score is returned.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field

from src.grading.engine import GRADED_FIELDS
from src.llm_client.parser import coerce_number, require_fields

from .classifiers import (
    InventiveConcept,
    SubjectMatter,
    classify_inventive_concept,
    classify_subject_matter,
    forced_inventive_concept,
)
from .config import (
    GENERIC_ERROR_MESSAGE,
    PROMPT_TEMPLATE_ID,
    REQUIRED_RESPONSE_FIELDS,
    VALIDITY_SCHEMA,
)
from .eligibility import OverallEligibility, resolve_eligibility
from .validity_score import normalize_validity_score

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of one :meth:`ValidityAnalysisService.analyze` call.

    On success every classification field is populated with canonical enum
    members; on error only ``status_message`` and the echoed identifiers are.
    ``warnings`` holds advisory messages such as a forced validity score.
    """

    status: str
    patent_number: object = None
    claim_number: object = None
    status_message: str | None = None
    subject_matter: SubjectMatter | None = None
    inventive_concept: InventiveConcept | None = None
    validity_score: object = None
    overall_eligibility: OverallEligibility | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.status == STATUS_SUCCESS

    @classmethod
    def error(cls, message: str, patent_number=None, claim_number=None) -> "AnalysisResult":
        return cls(
            status=STATUS_ERROR,
            status_message=message,
            patent_number=patent_number,
            claim_number=claim_number,
        )

    def to_dict(self) -> dict:
        """Plain-JSON view; enums become their string values."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, (SubjectMatter, InventiveConcept, OverallEligibility)):
                data[key] = value.value
        data["warnings"] = list(self.warnings)
        return data

    def grading_view(self) -> dict:
        """The three fields compared against ground truth."""
        data = self.to_dict()
        return {name: data[name] for name in GRADED_FIELDS}

    def to_json(self) -> str:
        data = self.to_dict()
        return json.dumps(
            {
                "subject_matter": data["subject_matter"],
                "inventive_concept": data["inventive_concept"],
                "overall_eligibility": data["overall_eligibility"],
                "validity_score": data["validity_score"],
            }
        )


class ValidityAnalysisService:
    """
    Orchestrates one claim analysis against external collaborators.

    Args:
        invoker: Object with ``ask(system_message, content, schema, model,
            temperature, max_tokens) -> dict``.
        renderer: Object with ``render(template_id, variables)`` returning
            an object with ``system_message``, ``content``, ``model``,
            ``temperature`` and ``max_tokens``.  Defaults to the built-in
            template renderer.
        template_id: Prompt template to render.
        schema: Structured-output schema passed to the invoker.
    """

    def __init__(
        self,
        invoker,
        renderer=None,
        template_id: str = PROMPT_TEMPLATE_ID,
        schema: dict = VALIDITY_SCHEMA,
    ):
        if renderer is None:
            from src.llm_client.prompts import TemplatePromptRenderer

            renderer = TemplatePromptRenderer()
        self.invoker = invoker
        self.renderer = renderer
        self.template_id = template_id
        self.schema = schema

    def _invoke(self, patent_number, claim_number, claim_text, abstract) -> dict:
        rendered = self.renderer.render(
            self.template_id,
            {
                "patent_id": patent_number,
                "claim_number": claim_number,
                "claim_text": claim_text,
                "abstract": abstract,
            },
        )
        raw = self.invoker.ask(
            system_message=rendered.system_message,
            content=rendered.content,
            schema=self.schema,
            model=rendered.model,
            temperature=rendered.temperature,
            max_tokens=rendered.max_tokens,
        )
        if not isinstance(raw, dict):
            raise TypeError(f"Model invoker returned {type(raw).__name__}, expected dict")
        return require_fields(raw, REQUIRED_RESPONSE_FIELDS)

    def analyze(self, patent_number, claim_number, claim_text, abstract) -> AnalysisResult:
        """
        Analyze one claim.

        Returns:
            :class:`AnalysisResult` with ``status='success'`` or
            ``status='error'``; never raises.
        """
        try:
            raw = self._invoke(patent_number, claim_number, claim_text, abstract)

            subject_matter = classify_subject_matter(raw["subject_matter"])
            inventive_concept = classify_inventive_concept(raw["inventive_concept"])

            eligibility = resolve_eligibility(subject_matter, inventive_concept)
            if eligibility.invalid:
                message = eligibility.error_message or GENERIC_ERROR_MESSAGE
                logger.warning(
                    "Eligibility rule violation for %s claim %s: %s",
                    patent_number, claim_number, message,
                )
                return AnalysisResult.error(message, patent_number, claim_number)

            score = normalize_validity_score(
                coerce_number(raw["validity_score"]), eligibility.value,
            )
            warnings: tuple[str, ...] = ()
            if score.invalid:
                logger.warning(
                    "Validity score forced from %s to %s for %s claim %s",
                    score.raw_score, score.forced_score, patent_number, claim_number,
                )
                warnings = (score.message,)

            echoed_patent = raw.get("patent_number")
            echoed_claim = raw.get("claim_number")

            return AnalysisResult(
                status=STATUS_SUCCESS,
                patent_number=echoed_patent if echoed_patent is not None else patent_number,
                claim_number=coerce_number(echoed_claim) if echoed_claim is not None else claim_number,
                subject_matter=subject_matter,
                inventive_concept=forced_inventive_concept(subject_matter, inventive_concept),
                validity_score=score.forced_score,
                overall_eligibility=eligibility.value,
                warnings=warnings,
            )
        except Exception:
            logger.exception(
                "Validity analysis failed for %s claim %s", patent_number, claim_number,
            )
            return AnalysisResult.error(GENERIC_ERROR_MESSAGE, patent_number, claim_number)
