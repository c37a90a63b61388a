"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from analysis_service.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment's .env file."""
    return Settings(
        _env_file=None,
        GEMINI_API_KEY="test-key",
        GEMINI_MODEL="gemini-test",
        GEMINI_FALLBACK_MODELS="",
        STREAM_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def sample_document() -> str:
    return "Contract renews annually unless terminated 30 days prior."


@pytest.fixture
def risk_report_chunks() -> list[str]:
    return [
        "## Risk Analysis Report\n",
        "- **Automatic Renewal**: The contract renews annually ",
        "unless terminated 30 days prior.\n",
        "- **Severity**: Medium\n",
    ]
