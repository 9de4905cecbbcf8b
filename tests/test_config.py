from pathlib import Path

import pytest
from pydantic import ValidationError

from portfolio_index.config import IndexSettings, get_settings


def test_reads_api_key_from_environment(monkeypatch):
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "from-env")
    monkeypatch.setenv("INDEX_MODE", "quote")

    settings = IndexSettings(_env_file=None)

    assert settings.alphavantage_api_key == "from-env"
    assert settings.index_mode == "quote"
    assert settings.index_weeks == 52
    assert settings.cache_max_age_hours == 24.0
    assert settings.holdings_path == Path("data/holdings.json")


def test_api_key_is_masked_for_logging():
    settings = IndexSettings(_env_file=None, alphavantage_api_key="secret")

    assert settings.dict_for_logging()["alphavantage_api_key"] == "***"


def test_rejects_unknown_mode():
    with pytest.raises(ValidationError):
        IndexSettings(_env_file=None, index_mode="daily")


def test_get_settings_applies_overrides():
    get_settings.cache_clear()
    try:
        settings = get_settings(index_weeks=10, alphavantage_api_key="k")
        assert settings.index_weeks == 10
        assert get_settings(index_weeks=10, alphavantage_api_key="k") is settings
    finally:
        get_settings.cache_clear()
