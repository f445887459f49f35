"""Chat completion model queried over HTTP with retries and rate limiting."""
from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx
from tenacity.wait import wait_base

from app.errors import (
    CompletionAPIError,
    CompletionHTTPError,
    CompletionTransportError,
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
)
from app.logging import log_event
from app.settings import Settings, get_settings
from llm.base import CompletionModel
from llm.choices import extract_choice_text
from llm.options import DEFAULT_POST_OPTIONS, PostOptions, resolve_options
from llm.rate_limit import RateLimiter
from llm.request import build_headers, build_request_body
from llm.retry import retry

LOGGER = logging.getLogger("testpilot.llm.chat_model")

_SNAPSHOT_LIMIT = 500


class ChatModel(CompletionModel):
    """A model that uses an OpenAI-compatible chat API to provide completions."""

    def __init__(
        self,
        model: str,
        attempts: int,
        rate_limiter: RateLimiter,
        instance_options: PostOptions | None = None,
        *,
        endpoint: str | None = None,
        auth_headers: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        retry_wait: wait_base | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the chat model.

        Args:
            model: Model identifier sent with every request
            attempts: Maximum request attempts including the first
            rate_limiter: Shared limiter gating every attempt
            instance_options: Options overriding the built-in defaults
            endpoint: Endpoint URL, defaults to the configured one
            auth_headers: JSON object of extra headers, defaults to the configured one
            client: Optional shared HTTP client; closed by its owner
            timeout: HTTP timeout in seconds when no client is given
            retry_wait: tenacity wait strategy between attempts
            settings: Settings to read defaults from
        """
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        settings = settings or get_settings()
        endpoint = endpoint or settings.llm_api_endpoint
        auth_headers = auth_headers or settings.llm_auth_headers
        if not endpoint:
            raise ConfigurationError("Please set the TESTPILOT_LLM_API_ENDPOINT environment variable.")
        if not auth_headers:
            raise ConfigurationError("Please set the TESTPILOT_LLM_AUTH_HEADERS environment variable.")

        self._model = model
        self._attempts = attempts
        self._rate_limiter = rate_limiter
        self._instance_options: PostOptions = dict(instance_options or {})  # type: ignore[assignment]
        self._endpoint = endpoint
        self._auth_headers = auth_headers
        self._client = client
        self._timeout = timeout if timeout is not None else settings.llm_timeout_seconds
        self._retry_wait = retry_wait

        LOGGER.info(
            "Using %s at %s with %d attempts and %s",
            self._model,
            self._endpoint,
            self._attempts,
            self._rate_limiter.description(),
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def query(
        self,
        prompt: str,
        request_options: PostOptions | None = None,
    ) -> set[str]:
        """
        Query the model for completions of ``prompt``.

        Args:
            prompt: The user prompt
            request_options: Options overriding instance and default options

        Returns:
            Distinct completion texts, possibly empty

        Raises:
            CompletionError: If the request or the response envelope fails
        """
        headers = build_headers(self._auth_headers)
        options = resolve_options(DEFAULT_POST_OPTIONS, self._instance_options, request_options)
        body = build_request_body(self._model, prompt, options)

        started = time.perf_counter()
        response = await retry(
            lambda: self._rate_limiter.next(lambda: self._post(body, headers)),
            self._attempts,
            wait=self._retry_wait,
        )
        log_event(
            LOGGER,
            "llm_query",
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
            prompt_length=len(prompt),
            **options,
        )

        choices = self._validated_choices(response)

        completions: set[str] = set()
        skipped = 0
        first_skipped: Any = None
        for choice in choices:
            text = extract_choice_text(choice)
            if text is None:
                if skipped == 0:
                    first_skipped = choice
                skipped += 1
                continue
            completions.add(text)

        if skipped:
            snippet = json.dumps(first_skipped, default=str)[:_SNAPSHOT_LIMIT]
            LOGGER.warning(
                "Skipped %d LLM choice(s) with no text content. Example: %s",
                skipped,
                snippet,
            )
        return completions

    async def completions(self, prompt: str, temperature: float) -> set[str]:
        """Get completions from the model, logging a warning instead of failing."""
        try:
            return await self.query(prompt, {"temperature": temperature})
        except Exception as exc:
            LOGGER.warning("Failed to get completions: %s", exc)
            return set()

    async def _post(self, body: dict[str, Any], headers: dict[str, str]) -> httpx.Response:
        try:
            if self._client is not None:
                response = await self._client.post(self._endpoint, json=body, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._endpoint, json=body, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise CompletionHTTPError(
                exc.response.status_code, exc.response.reason_phrase
            ) from exc
        except httpx.HTTPError as exc:
            raise CompletionTransportError(f"Request to {self._endpoint} failed: {exc}") from exc
        return response

    @staticmethod
    def _validated_choices(response: httpx.Response) -> list[Any]:
        if response.status_code != 200:
            raise CompletionHTTPError(response.status_code, response.reason_phrase)
        if not response.content:
            raise EmptyResponseError("Response data is empty")
        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Response data is not valid JSON") from exc
        if not data and not isinstance(data, (dict, list)):
            raise EmptyResponseError("Response data is empty")

        error = data.get("error") if isinstance(data, Mapping) else None
        # Empty objects and lists still signal an error.
        if error is not None and error not in ("", False, 0):
            raise CompletionAPIError(_error_message(error))

        choices = data.get("choices") if isinstance(data, Mapping) else None
        if not isinstance(choices, list):
            raise MalformedResponseError(
                "Unexpected LLM response format: expected choices array, "
                f"got {type(choices).__name__}"
            )
        return choices


def _error_message(error: Any) -> str:
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping) and isinstance(error.get("message"), str):
        return error["message"]
    return json.dumps(error, default=str)
