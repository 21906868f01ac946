from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .aggregator import DEFAULT_ANALYTICS_DAYS
from .trend_analyzer import DEFAULT_TREND_WINDOW, MIN_TREND_SAMPLE

REPO_ROOT = Path(__file__).resolve().parents[3]
load_dotenv(REPO_ROOT / ".env")


def resolve_db_path() -> str:
    db_env = (os.getenv("NOAH_DB_PATH") or os.getenv("DB_PATH") or "").strip()
    if db_env == ":memory:":
        return db_env
    db_path = Path(db_env) if db_env else (REPO_ROOT / "noah.db")
    if not db_path.is_absolute():
        db_path = REPO_ROOT / db_path
    return str(db_path)


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    db_path: str
    trend_window: int = DEFAULT_TREND_WINDOW
    trend_min_sample: int = MIN_TREND_SAMPLE
    analytics_days: int = DEFAULT_ANALYTICS_DAYS
    log_level: str = "INFO"


def load_settings() -> Settings:
    min_sample = max(1, env_int("NOAH_TREND_MIN_SAMPLE", MIN_TREND_SAMPLE))
    return Settings(
        db_path=resolve_db_path(),
        trend_window=max(min_sample, env_int("NOAH_TREND_WINDOW", DEFAULT_TREND_WINDOW)),
        trend_min_sample=min_sample,
        analytics_days=max(1, env_int("NOAH_ANALYTICS_DAYS", DEFAULT_ANALYTICS_DAYS)),
        log_level=(os.getenv("NOAH_LOG_LEVEL") or "INFO").strip().upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
