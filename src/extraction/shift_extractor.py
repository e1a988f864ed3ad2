import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from extraction.image_encoder import EncodedImage
from extraction.prompts import build_extraction_prompt
from llm.llm_client import LLMClient
from llm.schemas import SHIFT_RESPONSE_SCHEMA
from shift_sync.errors import MalformedOutputError
from shift_sync.models import Shift

logger = logging.getLogger(__name__)


def _strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_shift_payload(text: Optional[str]) -> list:
    """Parse the model's JSON text into a list of raw shift records.

    Accepts `{"shifts": [...]}` and a bare top-level array. An empty body
    means no shifts were found.
    """
    if not text or not text.strip():
        return []

    try:
        payload = json.loads(_strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error(f"AI response is not valid JSON: {e}")
        raise MalformedOutputError() from e

    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict):
        records = payload.get("shifts") or []
    else:
        raise MalformedOutputError()

    if not isinstance(records, list):
        raise MalformedOutputError()
    return records


def validate_shifts(records: list[Any]) -> list[Shift]:
    """Keep only complete, well-formed records, in their original order."""
    shifts: list[Shift] = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning(f"Dropping non-object shift record: {record!r}")
            continue
        try:
            shifts.append(Shift.model_validate(record))
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
            logger.warning(f"Dropping invalid shift record ({fields}): {record}")
    return shifts


class ShiftExtractor:

    def __init__(self, llm_client: Optional[LLMClient] = None, api_key: Optional[str] = None):
        self.llm_client = llm_client
        self.api_key = api_key
        self.last_dropped = 0

    def extract(self, image: EncodedImage, user_name: str) -> list[Shift]:
        # Builds the provider, and so checks its credential, before any call.
        llm = self.llm_client or LLMClient(api_key=self.api_key)

        prompt = build_extraction_prompt(user_name)
        text = llm.complete(prompt, image=image, schema=SHIFT_RESPONSE_SCHEMA)
        logger.debug(f"Raw AI response: {text}")

        records = parse_shift_payload(text)
        shifts = validate_shifts(records)
        self.last_dropped = len(records) - len(shifts)
        if self.last_dropped:
            logger.info(f"Kept {len(shifts)} of {len(records)} extracted shifts")
        return shifts
