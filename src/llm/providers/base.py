from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Optional

from extraction.image_encoder import EncodedImage


class LLMProvider(ABC):
    @abstractmethod
    def generate(
        self,
        *,
        prompt: str,
        image: Optional[EncodedImage] = None,
        schema: Optional[dict[str, Any]] = None,
        model: str | None = None,
    ) -> str:
        """
        Must return the model output as TEXT (we'll parse/validate JSON in ShiftExtractor).
        """
        raise NotImplementedError
