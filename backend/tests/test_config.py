"""Tests for application configuration."""
from app.config import Settings


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.DATABASE_URL.startswith("postgresql+asyncpg://")
    assert s.AI_PROVIDER in ("openai", "claude")
    assert s.SWIPE_DEFAULT_MIN_SCORE == 50
    assert s.ANALYSIS_BATCH_LIMIT == 100
    assert s.LLM_CIRCUIT_FAILURE_THRESHOLD == 5
    assert s.LINKEDIN_API_BASE_URL == "https://api.linkedin.com/rest"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("AI_PROVIDER", "claude")
    monkeypatch.setenv("SWIPE_DEFAULT_MIN_SCORE", "70")
    monkeypatch.setenv("LLM_CIRCUIT_OPEN_SECONDS", "15")
    s = Settings(_env_file=None)
    assert s.AI_PROVIDER == "claude"
    assert s.SWIPE_DEFAULT_MIN_SCORE == 70
    assert s.LLM_CIRCUIT_OPEN_SECONDS == 15.0


def test_unknown_environment_keys_ignored(monkeypatch):
    monkeypatch.setenv("JWT_SECRET_KEY", "leftover")
    s = Settings(_env_file=None)
    assert not hasattr(s, "JWT_SECRET_KEY")
