"""OpenAI-compatible completion client (Groq by default).

Wraps the OpenAI SDK pointed at the provider's base URL and translates
SDK failures into classified GatewayError instances.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import openai
from openai import OpenAI

from application.errors import GatewayError, GatewayErrorKind, classify_gateway_message
from application.ports.completion_gateway import CompletionConfig, CompletionResult
from backend.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0

_QUOTA_CODES = {"insufficient_quota", "quota_exceeded"}


def classify_error(exc: BaseException) -> GatewayErrorKind:
    """Map a provider failure to a GatewayErrorKind.

    Uses the SDK's exception types where they carry the information and
    falls back to matching the message text.
    """
    if isinstance(exc, openai.RateLimitError):
        code = getattr(exc, "code", None) or getattr(exc, "type", None)
        if code in _QUOTA_CODES or "quota" in str(exc).lower():
            return GatewayErrorKind.QUOTA_EXCEEDED
        return GatewayErrorKind.RATE_LIMITED
    if isinstance(exc, openai.APITimeoutError):
        return GatewayErrorKind.TIMEOUT
    return classify_gateway_message(str(exc))


class CompletionClient:
    """Non-streaming chat completions over the OpenAI SDK."""

    def __init__(self, client: OpenAI) -> None:
        self._client = client

    def complete(
        self, messages: List[Dict[str, str]], config: CompletionConfig
    ) -> CompletionResult:
        """Request a single completion.

        Args:
            messages: OpenAI-format message list, system prompt first.
            config: Model and sampling parameters.

        Raises:
            GatewayError: classified provider failure.
        """
        start_time = time.time()
        try:
            completion = self._client.chat.completions.create(
                messages=messages, **config.to_request_kwargs()
            )
        except openai.OpenAIError as e:
            kind = classify_error(e)
            logger.warning("Completion request failed (%s): %s", kind.value, e)
            raise GatewayError(str(e), kind) from e

        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        text = getattr(message, "content", None)
        if not text:
            raise GatewayError("Completion returned no content")

        usage = getattr(completion, "usage", None)
        total_tokens = getattr(usage, "total_tokens", 0) or 0
        latency_ms = round((time.time() - start_time) * 1000)
        logger.info(
            "Completion ok: model=%s tokens=%d latency_ms=%d",
            getattr(completion, "model", config.model),
            total_tokens,
            latency_ms,
        )
        return CompletionResult(
            text=text,
            total_tokens=total_tokens,
            model=getattr(completion, "model", None) or config.model,
        )


class UnconfiguredCompletionClient:
    """Stand-in used when no API key is set; every call fails cleanly."""

    def complete(
        self, messages: List[Dict[str, str]], config: CompletionConfig
    ) -> CompletionResult:
        raise GatewayError("GROQ_API_KEY not configured.")


class CompletionClientFactory:
    """Builds completion clients from settings."""

    @staticmethod
    def create_openai_client(
        settings: Settings,
        timeout: Optional[float] = None,
    ) -> OpenAI:
        """Create an OpenAI SDK client aimed at the configured provider."""
        api_key = settings.groq_api_key
        if not api_key:
            raise ValueError("GROQ_API_KEY not configured.")

        client_kwargs: Dict[str, Any] = {
            "api_key": api_key,
            "base_url": settings.completion_base_url,
            "timeout": timeout or settings.completion_timeout_seconds or DEFAULT_TIMEOUT,
            "max_retries": settings.completion_max_retries,
        }
        return OpenAI(**client_kwargs)

    @staticmethod
    def create(settings: Settings):
        """Return a CompletionClient, or a failing stand-in without an API key."""
        if not settings.groq_api_key:
            logger.warning("GROQ_API_KEY not set; chat messages will fail until configured")
            return UnconfiguredCompletionClient()
        return CompletionClient(CompletionClientFactory.create_openai_client(settings))


def completion_config_from_settings(settings: Settings) -> CompletionConfig:
    return CompletionConfig(model=settings.default_model)
