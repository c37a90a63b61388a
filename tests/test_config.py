"""Tests for runtime settings."""

from __future__ import annotations

import pytest

from analysis_service.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "GOOGLE_GENERATIVE_AI_API_KEY",
        "GEMINI_MODEL",
        "GEMINI_FALLBACK_MODELS",
        "STREAM_TIMEOUT_SECONDS",
        "CORS_ALLOW_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.gemini_api_key is None
    assert settings.gemini_model == "gemini-2.5-flash"
    assert settings.model_ids == ["gemini-2.5-flash"]
    assert settings.stream_timeout_seconds == 60.0
    assert settings.cors_origins_list == ["*"]


@pytest.mark.parametrize("env_name", ["GEMINI_API_KEY", "GOOGLE_API_KEY", "GOOGLE_GENERATIVE_AI_API_KEY"])
def test_api_key_env_names(monkeypatch, env_name):
    monkeypatch.setenv(env_name, "secret")

    assert Settings(_env_file=None).gemini_api_key == "secret"


def test_fallback_models_from_env(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")
    monkeypatch.setenv("GEMINI_FALLBACK_MODELS", "gemini-2.5-pro, ,gemini-2.0-flash")

    assert Settings(_env_file=None).model_ids == ["gemini-2.5-flash", "gemini-2.5-pro", "gemini-2.0-flash"]


def test_timeout_must_be_positive(monkeypatch):
    monkeypatch.setenv("STREAM_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_cors_origins(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000, https://app.example.com")

    assert Settings(_env_file=None).cors_origins_list == ["http://localhost:3000", "https://app.example.com"]
