"""Service catalog: built-in services plus persisted enabled-state overrides."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import Any, Optional

from ..models import ARTIFACT_TYPES, ArtifactType, LookupService
from ..store import CATALOG_KEY, KeyValueStore, safe_load, safe_save
from .builtins import default_services

log = logging.getLogger(__name__)


def _decode_overrides(payload: Optional[bytes]) -> dict[str, bool]:
    if payload is None:
        return {}
    try:
        data: Any = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        log.warning("Ignoring unreadable service overrides: %s", e)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring service overrides of type %s", type(data).__name__)
        return {}
    return {str(k): v for k, v in data.items() if isinstance(v, bool)}


class ServiceCatalog:
    """Process-wide registry of lookup services.

    The default table is never mutated; the catalog holds its own list and
    persists only `id -> enabled`. Callers read `services` as a tuple and
    change state through `toggle` / `reset_to_defaults`.
    """

    def __init__(self, store: KeyValueStore, services: Optional[Iterable[LookupService]] = None):
        self._store = store
        self._services: list[LookupService] = (
            list(services) if services is not None else default_services()
        )

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        services: Optional[Iterable[LookupService]] = None,
    ) -> "ServiceCatalog":
        catalog = cls(store, services)
        overrides = _decode_overrides(safe_load(store, CATALOG_KEY))
        # Unknown ids are ignored; missing ids keep their default state.
        catalog._services = [
            replace(s, enabled=overrides[s.id]) if s.id in overrides else s
            for s in catalog._services
        ]
        return catalog

    @property
    def services(self) -> tuple[LookupService, ...]:
        return tuple(self._services)

    def get(self, service_id: str) -> Optional[LookupService]:
        for s in self._services:
            if s.id == service_id:
                return s
        return None

    def all_services(self, category: ArtifactType) -> list[LookupService]:
        return [s for s in self._services if s.category == category]

    def enabled_services(self, category: ArtifactType) -> list[LookupService]:
        return [s for s in self._services if s.category == category and s.enabled]

    def toggle(self, service_id: str) -> Optional[LookupService]:
        """Flip a service's enabled flag. Unknown ids are a no-op (returns None)."""
        for i, s in enumerate(self._services):
            if s.id == service_id:
                updated = replace(s, enabled=not s.enabled)
                self._services[i] = updated
                self._save()
                return updated
        return None

    def reset_to_defaults(self) -> None:
        self._services = default_services()
        self._save()

    def statistics(self) -> dict[str, int]:
        stats: dict[str, int] = {}
        for category in ARTIFACT_TYPES:
            members = self.all_services(category)
            stats[category] = sum(1 for s in members if s.enabled)
            stats[f"{category}_total"] = len(members)
        return stats

    def _save(self) -> None:
        states = {s.id: s.enabled for s in self._services}
        safe_save(self._store, CATALOG_KEY, json.dumps(states).encode("utf-8"))
