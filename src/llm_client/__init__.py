"""
src/llm_client — model invocation layer for the validity analysis service.

Module layout
-------------
config.py   — endpoint, API key env var, timeout, retry schedule
parser.py   — reply content extraction, JSON decoding, field checks
retry.py    — error categorization, backoff schedule, retry wrapper
invoker.py  — request construction and the OpenAI-compatible invoker
prompts.py  — ``{{placeholder}}`` prompt templates and renderer

Public interface
----------------
Call the model with a structured schema:
    OpenAIChatInvoker().ask(system_message, content, schema, model, temperature, max_tokens)

Render the validity prompt:
    TemplatePromptRenderer().render(template_id, variables)
"""

from .invoker import OpenAIChatInvoker
from .parser import ModelResponseError
from .prompts import PromptTemplate, RenderedPrompt, TemplatePromptRenderer
from .retry import APIError, call_with_retry

__all__ = [
    "OpenAIChatInvoker",
    "ModelResponseError",
    "PromptTemplate",
    "RenderedPrompt",
    "TemplatePromptRenderer",
    "APIError",
    "call_with_retry",
]
