from __future__ import annotations
import json
from typing import Any, Optional

from extraction.image_encoder import EncodedImage
from llm.providers.base import LLMProvider


class MockProvider(LLMProvider):
    def generate(
        self,
        *,
        prompt: str,
        image: Optional[EncodedImage] = None,
        schema: Optional[dict[str, Any]] = None,
        model: str | None = None,
    ) -> str:
        """
        Returns a dummy schedule so the wizard can be clicked through without a model.
        """
        if "shifts" not in prompt.lower():
            return ""

        return json.dumps({
            "shifts": [
                {
                    "date": "2025-08-17",
                    "dayOfWeek": "ראשון",
                    "startTime": "09:00",
                    "endTime": "16:00",
                    "location": "ASICS"
                },
                {
                    "date": "2025-08-19",
                    "dayOfWeek": "שלישי",
                    "startTime": "15:30",
                    "endTime": "22:00",
                    "location": "ORIGINALS"
                },
                {
                    "date": "2025-08-21",
                    "dayOfWeek": "חמישי",
                    "startTime": "12:00",
                    "endTime": "22:00",
                    "location": "ASICS"
                }
            ]
        }, ensure_ascii=False)
