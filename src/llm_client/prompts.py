"""
Prompt rendering for the validity analysis call.

Templates hold ``{{name}}`` placeholders that are replaced with the test
case variables.  There is no versioning; a renderer holds whatever
templates it was built with.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from src.alice.config import (
    DEFAULT_MODEL,
    LLM_TEMPERATURE,
    MAX_TOKENS,
    PROMPT_TEMPLATE_ID,
)

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")


@dataclass(frozen=True)
class RenderedPrompt:
    system_message: str
    content: str
    model: str = DEFAULT_MODEL
    temperature: float = LLM_TEMPERATURE
    max_tokens: int = MAX_TOKENS


@dataclass(frozen=True)
class PromptTemplate:
    system_message: str
    user_message: str
    model: str = DEFAULT_MODEL
    temperature: float = LLM_TEMPERATURE
    max_tokens: int = MAX_TOKENS


DEFAULT_SYSTEM_MESSAGE = """\
You are a patent attorney applying the two-step Alice/Mayo framework for
subject-matter eligibility under 35 U.S.C. § 101.

Step One: decide whether the claim is directed to an abstract idea
("Abstract"), a law of nature or natural phenomenon ("Natural Phenomenon"),
or neither ("Not Abstract/Not Natural Phenomenon").

Step Two: only if Step One found an abstract idea or natural phenomenon,
decide whether the additional elements amount to an inventive concept
("Yes" or "No").  When Step One found neither, answer "-".

Finally rate the claim's validity from 1 (clearly invalid) to 5 (clearly
valid).  Respond with JSON only.\
"""

DEFAULT_USER_MESSAGE = """\
Patent number: {{patent_id}}
Claim number: {{claim_number}}

Claim text:
{{claim_text}}

Abstract:
{{abstract}}\
"""

DEFAULT_TEMPLATES: dict[str, PromptTemplate] = {
    PROMPT_TEMPLATE_ID: PromptTemplate(
        system_message=DEFAULT_SYSTEM_MESSAGE,
        user_message=DEFAULT_USER_MESSAGE,
    ),
}


def render_placeholders(text: str, variables: dict) -> str:
    """
    Replace every ``{{name}}`` in ``text`` with ``str(variables[name])``.

    Raises:
        ValueError: A placeholder has no matching variable.
    """
    missing = sorted({m.group(1) for m in _PLACEHOLDER.finditer(text)} - set(variables))
    if missing:
        raise ValueError(f"Prompt variables missing: {', '.join(missing)}")

    def _sub(match: re.Match) -> str:
        value = variables[match.group(1)]
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_sub, text)


class TemplatePromptRenderer:
    """Render prompts from an in-memory ``template_id → PromptTemplate`` map."""

    def __init__(self, templates: dict[str, PromptTemplate] | None = None):
        self.templates = dict(DEFAULT_TEMPLATES if templates is None else templates)

    def with_overrides(self, template_id: str = PROMPT_TEMPLATE_ID, **fields) -> "TemplatePromptRenderer":
        """Return a renderer whose ``template_id`` entry has ``fields`` replaced."""
        templates = dict(self.templates)
        templates[template_id] = replace(templates[template_id], **fields)
        return TemplatePromptRenderer(templates)

    def render(self, template_id: str, variables: dict) -> RenderedPrompt:
        """
        Render one template.

        Raises:
            KeyError: ``template_id`` is not registered.
            ValueError: A placeholder has no matching variable.
        """
        try:
            template = self.templates[template_id]
        except KeyError:
            raise KeyError(f"Unknown prompt template: {template_id!r}") from None

        return RenderedPrompt(
            system_message=render_placeholders(template.system_message, variables),
            content=render_placeholders(template.user_message, variables),
            model=template.model,
            temperature=template.temperature,
            max_tokens=template.max_tokens,
        )
