import logging
import os
from typing import Any, Optional

from extraction.image_encoder import EncodedImage
from llm.providers.base import LLMProvider
from shift_sync.errors import (
    AnalysisFailedError,
    AuthenticationError,
    ConfigurationError,
    ContentBlockedError,
    MalformedOutputError,
    QuotaExceededError,
    ShiftSyncError,
)

logger = logging.getLogger(__name__)

AUTH_MARKERS = ("api key", "api_key", "authentication", "unauthenticated", "permission_denied")
QUOTA_MARKERS = ("quota", "limit", "resource_exhausted")
SAFETY_MARKERS = ("blocked", "safety")


def _status_code(exc: Exception) -> Optional[int]:
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None)
    if code is None:
        # google-genai APIError carries the HTTP status as `.code`
        code = getattr(exc, "code", None)
    return code if isinstance(code, int) else None


def classify_provider_error(exc: Exception) -> ShiftSyncError:
    """Map a raw provider failure to one user-facing error."""
    status = _status_code(exc)
    if status in (401, 403):
        return AuthenticationError()
    if status == 429:
        return QuotaExceededError()

    message = str(exc).lower()
    if any(m in message for m in AUTH_MARKERS):
        return AuthenticationError()
    if any(m in message for m in QUOTA_MARKERS):
        return QuotaExceededError()
    if any(m in message for m in SAFETY_MARKERS):
        return ContentBlockedError()
    if "json" in message:
        return MalformedOutputError()
    return AnalysisFailedError()


def _provider_from_env(api_key: Optional[str]) -> LLMProvider:
    name = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
    if name == "gemini":
        from llm.providers.gemini_provider import GeminiProvider

        return GeminiProvider(api_key=api_key)
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider

        return OpenAIProvider(api_key=api_key)
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider

        return OllamaProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider

        return MockProvider()
    raise ConfigurationError(
        f"Application is not configured correctly. Unknown LLM_PROVIDER: {name}"
    )


class LLMClient:
    """Thin wrapper around a vision-capable provider.

    Construction validates the provider's credential, so a missing key fails
    before any request is sent. `complete` sends one request and returns the
    raw text; provider failures come back as ShiftSyncError subclasses.
    """

    def __init__(self, provider: Optional[LLMProvider] = None, api_key: Optional[str] = None):
        self.provider = provider if provider is not None else _provider_from_env(api_key)

    def complete(
        self,
        prompt: str,
        image: Optional[EncodedImage] = None,
        schema: Optional[dict[str, Any]] = None,
    ) -> str:
        try:
            return self.provider.generate(prompt=prompt, image=image, schema=schema)
        except ShiftSyncError:
            raise
        except Exception as e:
            logger.error(f"LLM provider call failed: {e}")
            raise classify_provider_error(e) from e
