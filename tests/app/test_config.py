"""Tests for application settings."""

from app.config import Settings, get_settings


def test_settings_read_env_file(tmp_path, monkeypatch):
    """Values in the .env file are loaded and unknown keys are kept."""
    monkeypatch.delenv("LLM_MODEL", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("LLM_MODEL=gpt-4.1-mini\nSOME_EXTRA_FLAG=1\n")

    settings = Settings(_env_file=str(env_file))

    assert settings.llm_model == "gpt-4.1-mini"
    assert settings.model_extra["some_extra_flag"] == "1"


def test_style_model_falls_back_to_reply_model(monkeypatch):
    """Without LLM_STYLE_MODEL the reply model analyses style too."""
    monkeypatch.setenv("LLM_MODEL", "gpt-4o")
    monkeypatch.delenv("LLM_STYLE_MODEL", raising=False)
    assert get_settings().style_model == "gpt-4o"

    monkeypatch.setenv("LLM_STYLE_MODEL", "gpt-4o-mini")
    assert get_settings().style_model == "gpt-4o-mini"


def test_test_environment_uses_test_database(monkeypatch):
    """ENV=test switches to TEST_DATABASE_URL."""
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    assert get_settings().database_url == "sqlite:///:memory:"
