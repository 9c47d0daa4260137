import pytest

from config import GAME_CONFIG, SCORING_CONFIG, Settings

ENV_KEYS = [
    "GROQ_API_KEY",
    "OPENAI_API_KEY",
    "MYSTERY_DATA_DIR",
    "MYSTERY_CASE_SOURCE",
    "MYSTERY_CATALOG_PATH",
    "MYSTERY_ILLUSTRATIONS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults():
    assert GAME_CONFIG.max_hints == 2
    assert GAME_CONFIG.history_cap == 10
    assert SCORING_CONFIG.base_score == 1000
    assert SCORING_CONFIG.floor_score == 100


def test_settings_from_env(clean_env):
    clean_env.setenv("GROQ_API_KEY", "gsk_test")
    clean_env.setenv("MYSTERY_DATA_DIR", "/tmp/noir")
    clean_env.setenv("MYSTERY_CASE_SOURCE", " Generate ")
    clean_env.setenv("MYSTERY_ILLUSTRATIONS", "yes")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings.from_env()
    assert settings.groq_api_key == "gsk_test"
    assert settings.data_dir == "/tmp/noir"
    assert settings.case_source == "generate"
    assert settings.illustrations is True
    assert settings.validate() == []


def test_missing_key_is_reported(clean_env):
    settings = Settings.from_env()
    assert settings.case_source == "catalog"
    assert settings.illustrations is False
    assert settings.validate() == ["GROQ_API_KEY is not set."]


def test_invalid_combinations_are_reported():
    problems = Settings(groq_api_key="k", case_source="dream", illustrations=True).validate()
    assert len(problems) == 2
    assert any("MYSTERY_CASE_SOURCE" in p for p in problems)
    assert any("OPENAI_API_KEY" in p for p in problems)
