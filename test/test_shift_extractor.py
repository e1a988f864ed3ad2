import json

import pytest

from extraction.prompts import build_extraction_prompt
from extraction.shift_extractor import ShiftExtractor
from llm.llm_client import LLMClient
from shift_sync.errors import ConfigurationError

SHIFTS = [
    {"date": "2025-08-19", "dayOfWeek": "שלישי", "startTime": "15:30", "endTime": "22:00", "location": "ASICS"},
    {"date": "2025-08-17", "dayOfWeek": "ראשון", "startTime": "09:00", "endTime": "16:00", "location": "ORIGINALS"},
]


def _extractor(fake_provider_factory, text):
    provider = fake_provider_factory(text)
    return ShiftExtractor(llm_client=LLMClient(provider=provider)), provider


def test_extracts_wrapped_shifts(fake_provider_factory, sample_image):
    extractor, provider = _extractor(fake_provider_factory, json.dumps({"shifts": SHIFTS}))
    shifts = extractor.extract(sample_image, "Dana")
    assert [s.date for s in shifts] == ["2025-08-19", "2025-08-17"]
    assert shifts[0].location == "ASICS"
    assert '"Dana"' in provider.calls[0]["prompt"]
    assert provider.calls[0]["image"] is sample_image


def test_accepts_bare_array(fake_provider_factory, sample_image):
    extractor, _ = _extractor(fake_provider_factory, json.dumps(SHIFTS))
    assert len(extractor.extract(sample_image, "Dana")) == 2


def test_keeps_model_order(fake_provider_factory, sample_image):
    extractor, _ = _extractor(fake_provider_factory, json.dumps({"shifts": SHIFTS + SHIFTS[:1]}))
    shifts = extractor.extract(sample_image, "Dana")
    # no sorting, no dedup
    assert [s.date for s in shifts] == ["2025-08-19", "2025-08-17", "2025-08-19"]


def test_mixed_script_name_in_prompt():
    prompt = build_extraction_prompt("דנה Dana", year=2025)
    assert '"דנה Dana"' in prompt
    assert "2025" in prompt
    assert '"9-16" -> startTime: "09:00", endTime: "16:00"' in prompt


def test_reference_year_from_env(monkeypatch):
    monkeypatch.setenv("SCHEDULE_REFERENCE_YEAR", "2031")
    prompt = build_extraction_prompt("Dana")
    assert "the year is 2031" in prompt


def test_missing_credential_fails_before_any_call(monkeypatch, sample_image):
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        ShiftExtractor(api_key="").extract(sample_image, "Dana")
