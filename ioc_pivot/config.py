"""Process configuration.

Environment variables, optionally seeded from a `.env` file (current dir,
then home dir, then ~/.ioc-pivot.env). CLI flags override these.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .store import default_store_path

log = logging.getLogger(__name__)

ENV_FILES = (Path(".env"), Path.home() / ".env", Path.home() / ".ioc-pivot.env")


def load_env_file() -> Optional[Path]:
    """Load the first .env file found. Existing environment variables win."""
    for env_path in ENV_FILES:
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


@dataclass(frozen=True)
class Settings:
    db_path: str
    log_level: str = "WARNING"
    batch_delay_seconds: Optional[float] = None

    @classmethod
    def from_env(cls) -> "Settings":
        delay: Optional[float] = None
        raw_delay = os.getenv("IOC_PIVOT_BATCH_DELAY")
        if raw_delay:
            try:
                delay = max(0.0, float(raw_delay))
            except ValueError:
                log.warning("Ignoring invalid IOC_PIVOT_BATCH_DELAY=%r", raw_delay)

        return cls(
            db_path=os.getenv("IOC_PIVOT_DB") or default_store_path(),
            log_level=(os.getenv("IOC_PIVOT_LOG_LEVEL") or "WARNING").upper(),
            batch_delay_seconds=delay,
        )
