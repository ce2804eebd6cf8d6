"""Persisted user preferences.

Stored as one JSON document in the key/value store so preferences survive
restarts. Unknown keys are ignored and bad values are clamped on load.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from typing import Any

from .store import PREFERENCES_KEY, KeyValueStore, safe_load, safe_save

log = logging.getLogger(__name__)


def _flag(value: Any, default: bool) -> bool:
    # Only real JSON booleans count; "false" is not False.
    return value if isinstance(value, bool) else default


@dataclass
class Preferences:
    open_in_background: bool = True
    auto_detect_type: bool = True
    max_history_count: int = 50
    max_batch_items: int = 20
    batch_delay_seconds: float = 0.5

    def normalized(self) -> "Preferences":
        """Return a sanitized copy with safe bounds."""
        defaults = Preferences()
        return Preferences(
            open_in_background=_flag(self.open_in_background, defaults.open_in_background),
            auto_detect_type=_flag(self.auto_detect_type, defaults.auto_detect_type),
            max_history_count=max(1, min(int(self.max_history_count), 1000)),
            max_batch_items=max(1, min(int(self.max_batch_items), 500)),
            batch_delay_seconds=max(0.0, min(float(self.batch_delay_seconds), 10.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def field_names() -> list[str]:
    return [f.name for f in fields(Preferences)]


def coerce_value(name: str, raw: str) -> Any:
    """Parse a CLI string into the type of preference `name`.

    Raises KeyError for an unknown preference and ValueError for a bad value.
    """
    defaults = Preferences()
    if name not in field_names():
        raise KeyError(name)
    current = getattr(defaults, name)
    if isinstance(current, bool):
        lowered = raw.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"Expected a boolean for {name}, got {raw!r}")
    if isinstance(current, int):
        return int(raw)
    return float(raw)


def load_preferences(store: KeyValueStore) -> Preferences:
    """Load preferences, returning defaults on error."""
    payload = safe_load(store, PREFERENCES_KEY)
    if payload is None:
        return Preferences()
    try:
        data = json.loads(payload.decode("utf-8"))
        if not isinstance(data, dict):
            return Preferences()
        known = {k: v for k, v in data.items() if k in field_names()}
        return Preferences(**known).normalized()
    except (UnicodeDecodeError, TypeError, ValueError) as e:
        log.warning("Ignoring unreadable preferences: %s", e)
        return Preferences()


def save_preferences(store: KeyValueStore, prefs: Preferences) -> Preferences:
    normalized = prefs.normalized()
    safe_save(store, PREFERENCES_KEY, json.dumps(asdict(normalized)).encode("utf-8"))
    return normalized
