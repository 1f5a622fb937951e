"""
Shared OpenAI SDK construction and error translation.
"""

from __future__ import annotations

import openai
from openai import AsyncOpenAI

from persona_rag.config import Settings, settings
from persona_rag.errors import BackendUnavailable, PersonaRagError, RateLimited

AUTH_STATUS_CODES = {401, 403}


def build_openai_client(config: Settings | None = None) -> AsyncOpenAI:
    """
    SDK retries are disabled; retry policy lives with the callers.
    """
    config = config or settings
    api_key = config.openai_api_key.get_secret_value() if config.openai_api_key else None
    return AsyncOpenAI(api_key=api_key, timeout=config.request_timeout_sec, max_retries=0)


def translate_openai_error(exc: openai.OpenAIError, backend: str) -> PersonaRagError:
    if isinstance(exc, openai.RateLimitError):
        return RateLimited(backend, str(exc))
    if isinstance(exc, openai.APIConnectionError):
        # also covers APITimeoutError
        return BackendUnavailable(backend, str(exc))
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code in AUTH_STATUS_CODES or exc.status_code >= 500:
            return BackendUnavailable(backend, f"{exc.status_code}: {exc.message}")
        return PersonaRagError(f"[{backend}] {exc.status_code}: {exc.message}")
    return BackendUnavailable(backend, str(exc))


__all__ = ["build_openai_client", "translate_openai_error"]
