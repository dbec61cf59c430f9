from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    db_path: Path
    timezone: str
    holiday_cutoff_year: Optional[int]
    refresh_interval_seconds: float
    alert_horizon_days: int
    log_level: str
    bot_token: str
    owner_telegram_id: int

    @property
    def bot_enabled(self) -> bool:
        return bool(self.bot_token) and self.owner_telegram_id > 0


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default).strip()
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def load_settings(env_file: Optional[str] = None) -> Settings:
    load_dotenv(env_file)

    db_raw = os.getenv("DB_PATH", "data/casetrack.db").strip()
    tz = os.getenv("TZ", "America/Lima").strip()

    # empty value disables the cutoff
    cutoff_raw = os.getenv("HOLIDAY_CUTOFF_YEAR", "2025").strip()
    cutoff = _int_env("HOLIDAY_CUTOFF_YEAR", "2025") if cutoff_raw else None

    interval = _int_env("REFRESH_INTERVAL_SECONDS", "600")
    if interval <= 0:
        raise RuntimeError("REFRESH_INTERVAL_SECONDS must be positive")

    horizon = _int_env("ALERT_HORIZON_DAYS", "3")
    if horizon < 0:
        raise RuntimeError("ALERT_HORIZON_DAYS cannot be negative")

    return Settings(
        db_path=Path(db_raw),
        timezone=tz,
        holiday_cutoff_year=cutoff,
        refresh_interval_seconds=float(interval),
        alert_horizon_days=horizon,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        bot_token=os.getenv("BOT_TOKEN", "").strip(),
        owner_telegram_id=_int_env("OWNER_TELEGRAM_ID", "0"),
    )
