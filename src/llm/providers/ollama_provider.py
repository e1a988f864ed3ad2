from __future__ import annotations
import os
from typing import Any, Optional

import httpx

from extraction.image_encoder import EncodedImage
from llm.schemas import strip_ordering
from .base import LLMProvider


class OllamaProvider(LLMProvider):
    def __init__(self):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.2-vision").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()

    def generate(
        self,
        *,
        prompt: str,
        image: Optional[EncodedImage] = None,
        schema: Optional[dict[str, Any]] = None,
        model: str | None = None,
    ) -> str:
        url = f"{self.base_url}/api/chat"
        message: dict[str, Any] = {"role": "user", "content": prompt}
        if image is not None:
            message["images"] = [image.data_b64]

        payload: dict[str, Any] = {
            "model": model or self.model,
            "stream": False,
            "messages": [message],
            "options": {"temperature": 0.2},
        }
        if schema is not None:
            payload["format"] = strip_ordering(schema)

        with httpx.Client(timeout=None) as client:
            r = client.post(url, json=payload)
            r.raise_for_status()
            data = r.json()

        return data["message"]["content"] or ""
