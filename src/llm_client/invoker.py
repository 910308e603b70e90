"""
Request construction and execution for the structured validity call.

One call is fully stateless: a system message, a user message and a JSON
schema go out; a dict decoded from the assistant reply comes back.
Transient failures are retried via :func:`retry.call_with_retry`; anything
else propagates to the analysis service, which owns the error boundary.
"""

from __future__ import annotations

import logging
import os
import time

import requests

from .config import (
    API_CONFIG,
    MAX_ATTEMPTS,
    REQUEST_TIMEOUT_SECONDS,
    RESPONSE_SCHEMA_NAME,
)
from .parser import extract_response_content, parse_structured_json
from .retry import call_with_retry

logger = logging.getLogger(__name__)


def build_request_headers(config: dict = API_CONFIG) -> dict:
    """
    Construct HTTP authentication headers.

    Raises:
        ValueError: The API key environment variable is unset.
    """
    env_var = config["api_key_env"]
    api_key = os.getenv(env_var)
    if not api_key:
        raise ValueError(
            f"API key not found. Set the '{env_var}' environment variable "
            "before running an evaluation."
        )
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


def build_request_payload(
    system_message: str,
    content: str,
    schema: dict,
    model: str,
    temperature: float,
    max_tokens: int,
) -> dict:
    """Build the chat-completions JSON body with a strict json_schema format."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_message},
            {"role": "user", "content": content},
        ],
        "temperature": temperature,
        "max_tokens": max_tokens,
        "response_format": {
            "type": "json_schema",
            "json_schema": {
                "name": RESPONSE_SCHEMA_NAME,
                "schema": schema,
                "strict": True,
            },
        },
    }


class OpenAIChatInvoker:
    """
    Model invoker over an OpenAI-compatible chat-completions endpoint.

    Args:
        config: Endpoint/auth dict shaped like ``API_CONFIG``.
        timeout: Per-request timeout in seconds.
        max_attempts: Attempts per :meth:`ask` (initial call + retries).
        session: Optional ``requests.Session`` for connection reuse.
        sleep: Backoff sleep, injected for tests.
    """

    def __init__(
        self,
        config: dict = API_CONFIG,
        timeout: int = REQUEST_TIMEOUT_SECONDS,
        max_attempts: int = MAX_ATTEMPTS,
        session: requests.Session | None = None,
        sleep=time.sleep,
    ):
        self.config = config
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.session = session
        self.sleep = sleep

    def _post(self, headers: dict, payload: dict) -> dict:
        poster = self.session.post if self.session is not None else requests.post
        start = time.monotonic()
        response = poster(
            self.config["endpoint"],
            headers=headers,
            json=payload,
            timeout=self.timeout,
        )
        latency = round(time.monotonic() - start, 3)
        response.raise_for_status()
        logger.debug("Model call returned %s in %.3fs", response.status_code, latency)
        return response.json()

    def ask(
        self,
        system_message: str,
        content: str,
        schema: dict,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> dict:
        """
        Send one structured request and return the decoded reply object.

        Raises:
            ValueError: Missing API key (not retried).
            requests.RequestException: Transport or HTTP error after retries.
            parser.ModelResponseError: Reply is not a JSON object.
        """
        headers = build_request_headers(self.config)
        payload = build_request_payload(
            system_message, content, schema, model, temperature, max_tokens,
        )

        def _attempt() -> dict:
            response_json = self._post(headers, payload)
            return parse_structured_json(extract_response_content(response_json))

        return call_with_retry(_attempt, max_attempts=self.max_attempts, sleep=self.sleep)
