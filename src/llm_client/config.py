"""
Model endpoint, authentication, and retry configuration.

The API key is read from the environment at call time, never stored here.
Model IDs, temperature and token limits come from the rendered prompt; the
values below are only the transport settings.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Endpoint and authentication
# ---------------------------------------------------------------------------

API_CONFIG: dict[str, str] = {
    "endpoint": "https://api.openai.com/v1/chat/completions",
    "auth_type": "bearer",
    "api_key_env": "OPENAI_API_KEY",
}

# Slow claims analyses routinely take over a minute on reasoning models.
REQUEST_TIMEOUT_SECONDS: int = 180

# ---------------------------------------------------------------------------
# Retry schedule
# ---------------------------------------------------------------------------

MAX_ATTEMPTS: int = 3

# Seconds to wait after the given failed attempt.
BACKOFF_SCHEDULE: dict[int, int] = {1: 10, 2: 30, 3: 90}

# Name the structured-output schema is registered under in the request.
RESPONSE_SCHEMA_NAME = "validity_analysis"
