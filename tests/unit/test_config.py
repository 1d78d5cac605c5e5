"""Tests for configuration loading and validation."""

import pytest

from itinerary_planner.config import (
    APIConfig,
    ItineraryPlannerConfig,
    LLMConfig,
    LLMProvider,
    ServerConfig,
    SystemConfig,
    config,
    initialize_config,
)


def test_api_config_from_env(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "gk")
    monkeypatch.setenv("TOMTOM_API_KEY", "tk")
    monkeypatch.setenv("SERPAPI_API_KEY", "sk")
    monkeypatch.delenv("GROQ_MODEL", raising=False)

    api = APIConfig.from_env()

    assert api.groq_api_key == "gk"
    assert api.tomtom_api_key == "tk"
    assert api.serpapi_api_key == "sk"
    assert api.groq_model == "llama-3.3-70b-versatile"


def test_api_config_requires_provider_key():
    assert APIConfig(groq_api_key="gk").validate()
    assert not APIConfig().validate()
    assert not APIConfig(groq_api_key="gk").validate(provider=LLMProvider.GEMINI)

    with pytest.raises(APIConfig.ValidationError) as exc_info:
        APIConfig().validate(raise_error=True)
    assert exc_info.value.missing_keys == ["GROQ_API_KEY"]
    assert "TOMTOM_API_KEY" in exc_info.value.optional_missing


def test_llm_config_from_env(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "Gemini")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.3")

    llm = LLMConfig.from_env()

    assert llm.provider is LLMProvider.GEMINI
    assert llm.temperature == 0.3


def test_llm_config_rejects_bad_temperature():
    with pytest.raises(ValueError):
        LLMConfig(temperature=3.5)


def test_server_config_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    server = ServerConfig.from_env()

    assert server.port == 9000
    assert server.cors_origins == ["http://a.test", "http://b.test"]


def test_full_config_validation(test_config):
    assert test_config.validate()

    bad = ItineraryPlannerConfig(
        api=APIConfig(groq_api_key="gk"),
        llm=LLMConfig(),
        system=SystemConfig(http_timeout=0),
    )
    assert not bad.validate()
    with pytest.raises(ItineraryPlannerConfig.ConfigurationError):
        bad.validate(raise_error=True)


def test_initialize_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        initialize_config(custom_config_path=str(tmp_path / "missing.env"))


def test_initialize_config_loads_custom_file(tmp_path, monkeypatch):
    env_file = tmp_path / "custom.env"
    env_file.write_text("GROQ_API_KEY=from-file\nHTTP_TIMEOUT=12\n")
    # Restored on teardown once the file has been loaded over them
    monkeypatch.setenv("GROQ_API_KEY", "placeholder")
    monkeypatch.setenv("HTTP_TIMEOUT", "30")
    for section in ("api", "llm", "server", "system"):
        monkeypatch.setattr(config, section, getattr(config, section))

    cfg = initialize_config(custom_config_path=str(env_file), validate=True)

    assert cfg.api.groq_api_key == "from-file"
    assert cfg.system.http_timeout == 12.0
