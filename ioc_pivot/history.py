"""Search history: bounded, most-recent-first, persisted after every mutation."""

from __future__ import annotations

import csv
import io
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union

from .models import ARTIFACT_TYPES, ArtifactType, SearchRecord, display_label
from .store import HISTORY_KEY, KeyValueStore, safe_load, safe_save

log = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 50
# A repeat search within this many most-recent records moves to the top.
DEDUP_WINDOW = 5

CSV_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _decode_records(payload: Optional[bytes]) -> list[SearchRecord]:
    if payload is None:
        return []
    try:
        data: Any = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        log.warning("Ignoring unreadable search history: %s", e)
        return []
    if not isinstance(data, list):
        log.warning("Ignoring search history of type %s", type(data).__name__)
        return []

    records: list[SearchRecord] = []
    for item in data:
        try:
            records.append(SearchRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            log.warning("Skipping malformed history record: %s", e)
    return records


class HistoryStore:
    def __init__(
        self,
        store: KeyValueStore,
        max_size: int = DEFAULT_MAX_SIZE,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._store = store
        self._max_size = max_size
        self._clock = clock
        self._records: list[SearchRecord] = []

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        max_size: int = DEFAULT_MAX_SIZE,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ) -> "HistoryStore":
        history = cls(store, max_size, clock=clock)
        history._records = _decode_records(safe_load(store, HISTORY_KEY))[:max_size]
        return history

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def records(self) -> list[SearchRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def set_max_size(self, max_size: int) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._max_size = max_size
        if len(self._records) > max_size:
            del self._records[max_size:]
            self._save()

    def get(self, record_id: str) -> Optional[SearchRecord]:
        for r in self._records:
            if r.id == record_id:
                return r
        return None

    def add_search(self, value: str, artifact_type: ArtifactType) -> SearchRecord:
        for prior in self._records[:DEDUP_WINDOW]:
            if prior.value == value and prior.type == artifact_type:
                self._records.remove(prior)
                break

        record = SearchRecord(
            id=uuid.uuid4().hex,
            value=value,
            type=artifact_type,
            timestamp=self._clock(),
        )
        self._records.insert(0, record)
        # Evict the oldest.
        del self._records[self._max_size:]
        self._save()
        return record

    def delete_search(self, record: Union[SearchRecord, str]) -> bool:
        record_id = record if isinstance(record, str) else record.id
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        self._save()
        return len(self._records) != before

    def clear(self) -> None:
        self._records = []
        self._save()

    def recent(self, limit: int = 10) -> list[SearchRecord]:
        return self._records[: max(limit, 0)]

    def search(self, query: str) -> list[SearchRecord]:
        """Case-insensitive substring match over value and display type."""
        if not query:
            return list(self._records)
        q = query.lower()
        return [
            r for r in self._records
            if q in r.value.lower() or q in r.display_type.lower()
        ]

    def statistics(self) -> dict[str, int]:
        stats = {t: 0 for t in ARTIFACT_TYPES}
        for r in self._records:
            stats[r.type] += 1
        return stats

    def export_csv(self) -> str:
        buf = io.StringIO()
        buf.write("Timestamp,Type,Value\n")
        # QUOTE_ALL doubles embedded quotes.
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for r in self._records:
            timestamp = r.timestamp.astimezone().strftime(CSV_TIMESTAMP_FORMAT)
            writer.writerow([timestamp, display_label(r.type), r.value])
        return buf.getvalue()

    def export_json(self) -> Optional[str]:
        payload = [
            {
                "timestamp": r.timestamp.isoformat(),
                "type": display_label(r.type),
                "value": r.value,
            }
            for r in self._records
        ]
        try:
            return json.dumps(payload, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            log.warning("Could not serialize search history: %s", e)
            return None

    def _save(self) -> None:
        payload = json.dumps([r.to_dict() for r in self._records], ensure_ascii=False)
        safe_save(self._store, HISTORY_KEY, payload.encode("utf-8"))
