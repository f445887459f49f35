from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from app.errors import ConfigurationError

SYSTEM_PROMPT = "You are a programming assistant."


def build_request_body(model: str, prompt: str, options: Mapping[str, Any]) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
    }
    body.update(options)
    return body


def build_headers(auth_headers: str) -> dict[str, str]:
    """Merge the JSON-encoded auth headers over the content type header."""

    try:
        parsed = json.loads(auth_headers)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"auth headers are not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ConfigurationError(
            f"auth headers must be a JSON object, got {type(parsed).__name__}"
        )
    headers = {"Content-Type": "application/json"}
    headers.update({str(key): str(value) for key, value in parsed.items()})
    return headers
