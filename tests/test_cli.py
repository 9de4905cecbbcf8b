import json

from portfolio_index import cli
from portfolio_index.config import get_settings


def test_parser_overrides_only_given_flags(tmp_path):
    args = cli.build_parser().parse_args(["--mode", "quote", "--weeks", "8", "--no-cache"])

    overrides = cli._overrides(args)

    assert overrides == {"index_mode": "quote", "index_weeks": 8, "cache_enabled": False}


def test_missing_api_key_exits_with_status_1(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ALPHAVANTAGE_API_KEY", raising=False)
    holdings = tmp_path / "holdings.json"
    holdings.write_text(json.dumps({"holdings": [{"ticker": "A", "weight": 1}]}), encoding="utf-8")
    get_settings.cache_clear()
    try:
        status = cli.main(["--holdings", str(holdings), "--output", str(tmp_path / "performance.json")])
    finally:
        get_settings.cache_clear()

    assert status == 1
    assert not (tmp_path / "performance.json").exists()


def test_missing_holdings_exits_with_status_1(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "test")
    get_settings.cache_clear()
    try:
        status = cli.main(["--holdings", str(tmp_path / "missing.json")])
    finally:
        get_settings.cache_clear()

    assert status == 1


def test_invalid_flag_value_exits_with_status_1(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "test")
    get_settings.cache_clear()
    try:
        status = cli.main(["--weeks", "0", "--output", str(tmp_path / "performance.json")])
    finally:
        get_settings.cache_clear()

    assert status == 1
    assert not (tmp_path / "performance.json").exists()


def test_invalid_environment_value_exits_with_status_1(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ALPHAVANTAGE_API_KEY", "test")
    monkeypatch.setenv("INDEX_MODE", "daily")
    get_settings.cache_clear()
    try:
        status = cli.main([])
    finally:
        get_settings.cache_clear()

    assert status == 1
