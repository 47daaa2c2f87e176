from __future__ import annotations

import pytest

from debate_arena.config import ConfigurationError, Settings

_KEY_ENV_VARS = (
    "GROQ_API_KEY",
    "DEBATE_ARENA_GROQ_API_KEY",
    "FAL_KEY",
    "FAL_API_KEY",
    "DEBATE_ARENA_FAL_API_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_keys_are_fatal(clean_env) -> None:
    settings = Settings(_env_file=None)

    with pytest.raises(ConfigurationError, match="GROQ_API_KEY, FAL_KEY"):
        settings.require_provider_keys()


def test_blank_key_counts_as_missing(clean_env) -> None:
    settings = Settings(groq_api_key="   ", fal_api_key="fal", _env_file=None)

    with pytest.raises(ConfigurationError, match="GROQ_API_KEY"):
        settings.require_provider_keys()


def test_provider_standard_env_names_are_accepted(clean_env) -> None:
    clean_env.setenv("GROQ_API_KEY", "groq-from-env")
    clean_env.setenv("FAL_KEY", "fal-from-env")
    clean_env.setenv("DEBATE_ARENA_CHAT_MODEL", "llama-test")

    settings = Settings(_env_file=None)
    settings.require_provider_keys()

    assert settings.groq_api_key.get_secret_value() == "groq-from-env"
    assert settings.fal_api_key.get_secret_value() == "fal-from-env"
    assert settings.chat_model == "llama-test"
