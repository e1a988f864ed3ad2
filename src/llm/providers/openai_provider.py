from __future__ import annotations
import os
from typing import Any, Optional

import httpx

from extraction.image_encoder import EncodedImage
from llm.credentials import require_credential
from llm.schemas import strip_ordering
from .base import LLMProvider


class OpenAIProvider(LLMProvider):
    def __init__(self, api_key: str | None = None):
        self.api_key = require_credential(
            api_key if api_key is not None else os.getenv("OPENAI_API_KEY", ""),
            "OPENAI_API_KEY",
        )
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()

    def generate(
        self,
        *,
        prompt: str,
        image: Optional[EncodedImage] = None,
        schema: Optional[dict[str, Any]] = None,
        model: str | None = None,
    ) -> str:
        url = f"{self.base_url}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
        if image is not None:
            content.append({"type": "image_url", "image_url": {"url": image.data_uri}})

        payload: dict[str, Any] = {
            "model": model or self.model,
            "messages": [{"role": "user", "content": content}],
            "temperature": 0.2,
        }
        if schema is not None:
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "shifts", "schema": strip_ordering(schema)},
            }

        with httpx.Client(timeout=None) as client:
            r = client.post(url, headers=headers, json=payload)
            r.raise_for_status()
            data = r.json()

        return data["choices"][0]["message"]["content"] or ""
