import os
from pathlib import Path

from noah.backend.app import config


def test_resolve_db_path_stable_across_cwd(monkeypatch):
    original = os.getcwd()
    expected = Path(config.__file__).resolve().parents[3] / "noah.db"
    monkeypatch.delenv("NOAH_DB_PATH", raising=False)
    monkeypatch.delenv("DB_PATH", raising=False)
    try:
        os.chdir(Path(config.__file__).resolve().parents[2])
        assert Path(config.resolve_db_path()) == expected
    finally:
        os.chdir(original)


def test_relative_db_path_resolves_against_repo_root(monkeypatch):
    monkeypatch.setenv("NOAH_DB_PATH", "data/checkins.db")
    assert Path(config.resolve_db_path()) == config.REPO_ROOT / "data" / "checkins.db"


def test_memory_db_path_kept(monkeypatch):
    monkeypatch.setenv("NOAH_DB_PATH", ":memory:")
    assert config.resolve_db_path() == ":memory:"


def test_settings_defaults(monkeypatch):
    for name in ("NOAH_TREND_WINDOW", "NOAH_TREND_MIN_SAMPLE", "NOAH_ANALYTICS_DAYS", "NOAH_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = config.load_settings()
    assert settings.trend_window == 7
    assert settings.trend_min_sample == 3
    assert settings.analytics_days == 30
    assert settings.log_level == "INFO"


def test_settings_invalid_and_clamped_values(monkeypatch):
    monkeypatch.setenv("NOAH_TREND_WINDOW", "2")
    monkeypatch.setenv("NOAH_TREND_MIN_SAMPLE", "4")
    monkeypatch.setenv("NOAH_ANALYTICS_DAYS", "soon")
    settings = config.load_settings()
    assert settings.trend_min_sample == 4
    assert settings.trend_window == 4
    assert settings.analytics_days == 30
