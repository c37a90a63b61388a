"""
Real-API integration tests for the analysis stream.
Uses .env from the repository root when present. Skips when GEMINI_API_KEY / GOOGLE_API_KEY are not set.
Run: python -m pytest tests/test_gemini_integration.py -v
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import pytest

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")
GEMINI_KEY = os.environ.get("GEMINI_API_KEY", "").strip() or os.environ.get("GOOGLE_API_KEY", "").strip()

pytestmark = pytest.mark.skipif(not GEMINI_KEY, reason="GEMINI_API_KEY or GOOGLE_API_KEY not set")


async def _run(document_text: str, action: str):
    from analysis_service.assembler import ResponseAssembler
    from analysis_service.config import Settings
    from analysis_service.generation import build_stream_client
    from analysis_service.pipeline import AnalysisPipeline

    pipeline = AnalysisPipeline(build_stream_client(Settings()))
    prepared = pipeline.prepare({"pdfText": document_text, "action": action})
    return await ResponseAssembler().consume(prepared.message_id, pipeline.stream(prepared))


@pytest.mark.asyncio
async def test_risk_scan_real_api():
    message = await _run("Contract renews annually unless terminated 30 days prior.", "riskScan")

    assert message.state.value == "completed", message.error
    assert message.fragment_count >= 1
    assert message.text.lstrip().startswith("## Risk Analysis Report")
    assert re.search(r"^\s*[-*].*\b(Low|Medium|High)\b", message.text, re.MULTILINE)


@pytest.mark.asyncio
async def test_extract_tags_real_api():
    message = await _run("Apollo program overview.", "extractTags")

    assert message.state.value == "completed", message.error
    assert "," in message.text
    assert not re.search(r"^\s*#{1,6}\s", message.text, re.MULTILINE)
