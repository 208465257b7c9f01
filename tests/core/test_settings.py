from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from core.settings import DEFAULT_API_BASE_URL, Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("COINPAPRIKA_BASE_URL", "API_BASE_URL", "PORTFOLIO_STORAGE_PATH", "CATALOG_LIMIT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.portfolio_key == "crypto-portfolio"
    assert settings.dark_mode_key == "crypto-portfolio-dark-mode"
    assert settings.catalog_limit == 100
    assert settings.suggestion_limit == 10
    assert settings.storage_path == Path("./data/local_storage.json")


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("PORTFOLIO_STORAGE_PATH", str(tmp_path / "state.json"))
    monkeypatch.setenv("PORTFOLIO_STORAGE_KEY", "alt-portfolio")
    monkeypatch.setenv("CATALOG_LIMIT", "25")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.storage_path == tmp_path / "state.json"
    assert settings.portfolio_key == "alt-portfolio"
    assert settings.catalog_limit == 25
    assert settings.log_level == "DEBUG"


def test_unknown_log_level_falls_back_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    assert Settings(_env_file=None).log_level == "INFO"


@pytest.mark.parametrize(("name", "value"), [("CATALOG_LIMIT", "0"), ("REQUEST_TIMEOUT_SECONDS", "0")])
def test_rejects_non_positive_limits(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_suggestion_limit_cannot_exceed_ten(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SUGGESTION_LIMIT", "50")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
