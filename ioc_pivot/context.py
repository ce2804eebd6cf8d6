"""Process wiring.

One `LookupContext` is built at process start and handed to whatever needs
the catalog, the history or the browser: the CLI, the web API, batch jobs.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Optional, cast

from .batch import BatchJob, BatchSummary, run_batch, start_batch
from .browser import Browser, SystemBrowser
from .catalog import ServiceCatalog
from .classify import classify
from .history import HistoryStore
from .models import ArtifactType, Classification, SearchRecord
from .preferences import Preferences, load_preferences, save_preferences
from .resolver import resolve
from .store import KeyValueStore, MemoryStore, SqliteStore

log = logging.getLogger(__name__)


@dataclass
class LookupResult:
    value: str
    classification: Classification
    type: Optional[ArtifactType] = None
    urls: list[str] = field(default_factory=list)
    record: Optional[SearchRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "classification": self.classification.to_dict(),
            "type": self.type,
            "urls": list(self.urls),
            "record_id": self.record.id if self.record else None,
            "error": self.error,
        }


@dataclass
class LookupContext:
    store: KeyValueStore
    catalog: ServiceCatalog
    history: HistoryStore
    preferences: Preferences
    browser: Browser

    @classmethod
    def build(cls, store: KeyValueStore, browser: Optional[Browser] = None) -> "LookupContext":
        prefs = load_preferences(store)
        return cls(
            store=store,
            catalog=ServiceCatalog.load(store),
            history=HistoryStore.load(store, max_size=prefs.max_history_count),
            preferences=prefs,
            browser=browser or SystemBrowser(),
        )

    def update_preferences(self, prefs: Preferences) -> Preferences:
        self.preferences = save_preferences(self.store, prefs)
        self.history.set_max_size(self.preferences.max_history_count)
        return self.preferences

    def reset_preferences(self) -> Preferences:
        return self.update_preferences(Preferences())

    def lookup(self, value: str, artifact_type: Optional[ArtifactType] = None) -> LookupResult:
        """Classify, resolve, open every URL and record the search."""
        text = value.strip()
        outcome = classify(text)
        if not outcome.is_valid:
            return LookupResult(text, outcome, error=str(outcome))
        if artifact_type is None and not self.preferences.auto_detect_type:
            return LookupResult(text, outcome, error="artifact type required")

        target = cast(ArtifactType, artifact_type or outcome.type)
        urls = resolve(self.catalog, target, text)
        if not urls:
            return LookupResult(text, outcome, type=target, error="no services enabled")

        self.browser.open_all(urls, in_background=self.preferences.open_in_background)
        record = self.history.add_search(text, target)
        return LookupResult(text, outcome, type=target, urls=urls, record=record)

    def repeat(self, record: SearchRecord) -> list[str]:
        """Re-open a history record's lookups without recording it again."""
        urls = resolve(self.catalog, record.type, record.value)
        self.browser.open_all(urls, in_background=self.preferences.open_in_background)
        return urls

    def _batch_kwargs(self, overrides: dict[str, Any]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "catalog": self.catalog,
            "history": self.history,
            "browser": self.browser,
            "max_items": self.preferences.max_batch_items,
            "in_background": self.preferences.open_in_background,
            "delay_seconds": self.preferences.batch_delay_seconds,
        }
        kwargs.update(overrides)
        return kwargs

    def run_batch(self, lines: list[str], artifact_type: ArtifactType, **overrides: Any) -> BatchSummary:
        return run_batch(lines, artifact_type, **self._batch_kwargs(overrides))

    def start_batch(self, lines: list[str], artifact_type: ArtifactType, **overrides: Any) -> BatchJob:
        return start_batch(lines, artifact_type, **self._batch_kwargs(overrides))


def open_context(db_path: Optional[str] = None, browser: Optional[Browser] = None) -> LookupContext:
    """Build the process context on a sqlite store (in memory when db_path is ':memory:')."""
    store: KeyValueStore
    if db_path == ":memory:":
        store = MemoryStore()
    else:
        from .config import Settings

        path = db_path or Settings.from_env().db_path
        try:
            store = SqliteStore(path)
        except (sqlite3.Error, OSError) as e:
            log.warning("Could not open state database %s, keeping state in memory: %s", path, e)
            store = MemoryStore()
    return LookupContext.build(store, browser=browser)
