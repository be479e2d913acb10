"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from knowledge_import import config
from knowledge_import.config import EmptyExtractionPolicy, Environment, Settings, get_settings


def test_settings_defaults():
    """Test that settings have correct defaults."""
    settings = Settings()

    assert settings.app_name == "knowledge-import"
    assert settings.environment == Environment.DEVELOPMENT
    assert settings.log_level == "INFO"
    assert settings.allowed_file_types == ["docx", "xlsx"]
    assert settings.max_upload_size_bytes == 20 * 1024 * 1024
    assert settings.parser.version == "1.0.0"
    assert settings.parser.placeholder_text == "Document content extracted (basic parsing)"
    assert settings.parser.empty_extraction == EmptyExtractionPolicy.PLACEHOLDER
    assert settings.parser.implicit_headings is True
    assert settings.test_generation.base_url == "https://api.x.ai/v1"
    assert settings.test_generation.model == "grok-beta"
    assert not settings.test_generation.is_configured
    assert settings.server.port == 8004


def test_settings_from_env(monkeypatch):
    """Test that settings load from environment variables."""
    monkeypatch.setenv("APP_NAME", "import-test")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("GROK_API_KEY", "key-123")
    monkeypatch.setenv("PARSER_EMPTY_EXTRACTION", "Error")
    monkeypatch.setenv("SEGMENTER_IMPLICIT_HEADINGS", "false")

    settings = get_settings()

    assert settings.app_name == "import-test"
    assert settings.log_level == "DEBUG"
    assert settings.test_generation.api_key == "key-123"
    assert settings.test_generation.is_configured
    assert settings.parser.empty_extraction == EmptyExtractionPolicy.ERROR
    assert settings.parser.implicit_headings is False


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("docx", ["docx"]),
        (" .DOCX , xlsx ,", ["docx", "xlsx"]),
        ("", ["docx", "xlsx"]),
    ],
)
def test_allowed_file_types_parsing(monkeypatch, raw, expected):
    monkeypatch.setenv("ALLOWED_FILE_TYPES", raw)
    assert Settings().allowed_file_types == expected


def test_invalid_log_level():
    with pytest.raises(ValidationError):
        Settings(log_level="LOUD")


def test_unknown_environment_is_development(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "qa")
    assert Settings().is_development


def test_production_rejects_debug(monkeypatch):
    """Test that get_settings refuses DEBUG in production."""
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("DEBUG", "true")

    with pytest.raises(ValueError):
        get_settings()
    config._settings = None


def test_production_without_debug(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    settings = get_settings()
    assert settings.is_production
    assert not settings.is_development


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, ["*"]),
        ("https://kb.example.com, http://localhost:3000", ["https://kb.example.com", "http://localhost:3000"]),
        (" , ", ["*"]),
    ],
)
def test_cors_origins(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("CORS_ORIGINS", raising=False)
    else:
        monkeypatch.setenv("CORS_ORIGINS", raw)
    assert Settings().cors_origins == expected
