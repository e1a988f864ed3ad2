from __future__ import annotations
import os
from typing import Any, Optional

from google import genai
from google.genai import types

from extraction.image_encoder import EncodedImage
from llm.credentials import require_credential
from shift_sync.errors import ContentBlockedError
from .base import LLMProvider

# candidate stopped by a content filter; response.text is empty then
BLOCKED_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "IMAGE_SAFETY"}


def _to_gemini_schema(schema: Any) -> Any:
    """Gemini spells types in upper case (STRING, OBJECT, ...)."""
    if isinstance(schema, dict):
        out = {}
        for k, v in schema.items():
            if k == "type" and isinstance(v, str):
                out[k] = v.upper()
            elif k == "properties" and isinstance(v, dict):
                out[k] = {name: _to_gemini_schema(sub) for name, sub in v.items()}
            else:
                out[k] = _to_gemini_schema(v)
        return out
    if isinstance(schema, list):
        return [_to_gemini_schema(v) for v in schema]
    return schema


class GeminiProvider(LLMProvider):
    def __init__(self, api_key: str | None = None):
        self.api_key = require_credential(
            api_key if api_key is not None else os.getenv("GEMINI_API_KEY", ""),
            "GEMINI_API_KEY",
        )
        self.model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip()
        self._client = genai.Client(api_key=self.api_key)

    def generate(
        self,
        *,
        prompt: str,
        image: Optional[EncodedImage] = None,
        schema: Optional[dict[str, Any]] = None,
        model: str | None = None,
    ) -> str:
        parts = [types.Part.from_text(text=prompt)]
        if image is not None:
            parts.append(
                types.Part.from_bytes(data=image.raw_bytes(), mime_type=image.mime_type)
            )

        config = None
        if schema is not None:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=_to_gemini_schema(schema),
            )

        response = self._client.models.generate_content(
            model=model or self.model,
            contents=[types.Content(role="user", parts=parts)],
            config=config,
        )

        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise ContentBlockedError()

        for candidate in getattr(response, "candidates", None) or []:
            reason = getattr(candidate, "finish_reason", None)
            if getattr(reason, "name", reason) in BLOCKED_FINISH_REASONS:
                raise ContentBlockedError()

        return response.text or ""
