"""
Response parsing for chat-completion replies.

No I/O occurs here; all functions are pure transformations of dicts and
strings so they can be unit tested without a network.
"""

from __future__ import annotations

import json
import re


class ModelResponseError(ValueError):
    """The model reply is not a JSON object or lacks a required field."""


def extract_response_content(response_json: dict) -> str:
    """
    Pull the assistant text out of a raw chat-completions response.

    Handles the OpenAI-compatible shape (``choices[0].message.content``) and
    the Anthropic shape (``content[0].text``).

    Raises:
        ModelResponseError: The structure matches neither shape.
    """
    try:
        if "choices" in response_json:
            return response_json["choices"][0]["message"]["content"]
        if "content" in response_json:
            return response_json["content"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ModelResponseError(f"Malformed model response: {exc!r}") from exc

    raise ModelResponseError(
        "Unrecognized model response format. "
        f"Top-level keys present: {list(response_json.keys())}"
    )


def parse_structured_json(content: str) -> dict:
    """
    Decode a JSON object reply, tolerating Markdown code fences.

    Raises:
        ModelResponseError: Content is empty, not JSON, or not an object.
    """
    if not content or not content.strip():
        raise ModelResponseError("Model returned empty content")

    content = content.strip()
    if content.startswith("```"):
        content = re.sub(r"^```(?:json)?\n?", "", content)
        content = re.sub(r"\n?```$", "", content)
        content = content.strip()

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ModelResponseError(f"Model reply is not valid JSON: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ModelResponseError(
            f"Expected a JSON object, got {type(parsed).__name__}"
        )
    return parsed


def require_fields(payload: dict, fields) -> dict:
    """
    Check that every name in ``fields`` is present and non-null.

    Returns:
        ``payload`` unchanged.

    Raises:
        ModelResponseError: Listing the missing fields.
    """
    missing = [name for name in fields if payload.get(name) is None]
    if missing:
        raise ModelResponseError(
            f"Model reply missing required fields: {', '.join(missing)}"
        )
    return payload


def coerce_number(value):
    """
    Convert a JSON number (``4``, ``4.0``, ``"4"``) to ``int``
    when it is integral; anything else is returned unchanged.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    return int(number) if number.is_integer() else number
