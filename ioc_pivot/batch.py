"""Batch lookups.

Items are processed strictly one at a time with a throttle between launches,
so the browser is not flooded. A batch never fails as a whole: invalid items
are skipped and per-item errors are counted.

`run_batch()` is synchronous. `BatchJob` runs it on a single background worker
and exposes progress through a queue plus a cancel signal checked before every
item.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional, Union

from .browser import Browser
from .catalog import ServiceCatalog
from .classify import classify
from .history import HistoryStore
from .models import ArtifactType, is_artifact_type
from .resolver import resolve

log = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 20
DEFAULT_DELAY_SECONDS = 0.5


@dataclass(frozen=True)
class BatchProgress:
    processed: int
    submitted: int
    value: str
    urls: tuple[str, ...]


@dataclass(frozen=True)
class BatchSummary:
    processed: int
    submitted: int
    received: int = 0  # non-empty lines before truncation
    skipped: int = 0  # not a valid artifact
    failed: int = 0
    cancelled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


BatchEvent = Union[BatchProgress, BatchSummary]


def prepare_lines(lines: Iterable[str], max_items: Optional[int]) -> tuple[list[str], int]:
    """Trim, drop empty lines, truncate. Returns (items, non-empty line count)."""
    if max_items is not None and max_items < 0:
        raise ValueError(f"max_items must be >= 0, got {max_items}")
    cleaned = [line.strip() for line in lines if line.strip()]
    if max_items is None:
        return cleaned, len(cleaned)
    return cleaned[:max_items], len(cleaned)


def run_batch(
    lines: Iterable[str],
    artifact_type: ArtifactType,
    *,
    catalog: ServiceCatalog,
    history: HistoryStore,
    browser: Browser,
    max_items: Optional[int] = DEFAULT_MAX_ITEMS,
    enabled_only: bool = True,
    in_background: bool = True,
    delay_seconds: float = DEFAULT_DELAY_SECONDS,
    on_progress: Optional[Callable[[BatchProgress], None]] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BatchSummary:
    if not is_artifact_type(artifact_type):
        raise ValueError(f"Unknown artifact type: {artifact_type!r}")

    items, received = prepare_lines(lines, max_items)
    submitted = len(items)
    processed = skipped = failed = 0
    cancelled = False

    log.info("Batch started: %d %s item(s)", submitted, artifact_type)

    for index, item in enumerate(items):
        if cancel_event is not None and cancel_event.is_set():
            cancelled = True
            break

        if not classify(item).is_valid:
            log.debug("Skipping invalid batch item %r", item)
            skipped += 1
            continue

        try:
            urls = resolve(catalog, artifact_type, item, enabled_only=enabled_only)
            browser.open_all(urls, in_background=in_background)
            history.add_search(item, artifact_type)
        except Exception as e:  # noqa: BLE001
            log.warning("Batch item %r failed: %s", item, e)
            failed += 1
            continue

        processed += 1
        if on_progress is not None:
            on_progress(BatchProgress(processed, submitted, item, tuple(urls)))

        if delay_seconds > 0 and index < submitted - 1:
            if cancel_event is not None:
                # Wakes early on cancel.
                cancel_event.wait(delay_seconds)
            else:
                time.sleep(delay_seconds)

    summary = BatchSummary(
        processed=processed,
        submitted=submitted,
        received=received,
        skipped=skipped,
        failed=failed,
        cancelled=cancelled,
    )
    if cancelled:
        log.info("Batch cancelled after %d of %d item(s)", processed, submitted)
    else:
        log.info("Batch finished: processed %d of %d item(s)", processed, submitted)
    return summary


class BatchJob:
    """A batch running on one background worker.

    Progress and the final summary arrive on `events`; the summary is always
    the last event. Launching a second job while one runs is the caller's
    concern.
    """

    def __init__(self, lines: Iterable[str], artifact_type: ArtifactType, **kwargs: Any):
        if not is_artifact_type(artifact_type):
            raise ValueError(f"Unknown artifact type: {artifact_type!r}")
        raw = list(lines)
        items, self._received = prepare_lines(raw, kwargs.get("max_items", DEFAULT_MAX_ITEMS))
        self._submitted = len(items)
        self._processed = 0
        self._on_progress: Optional[Callable[[BatchProgress], None]] = kwargs.pop("on_progress", None)

        self.events: queue.Queue[BatchEvent] = queue.Queue()
        self._cancel: threading.Event = kwargs.pop("cancel_event", None) or threading.Event()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ioc-pivot-batch")
        self._future: Future[BatchSummary] = self._executor.submit(
            run_batch,
            raw,
            artifact_type,
            on_progress=self._progress,
            cancel_event=self._cancel,
            **kwargs,
        )
        self._future.add_done_callback(self._finished)

    def _progress(self, event: BatchProgress) -> None:
        self._processed = event.processed
        self.events.put(event)
        if self._on_progress is not None:
            self._on_progress(event)

    def _finished(self, fut: Future[BatchSummary]) -> None:
        try:
            summary = fut.result()
        except Exception as e:  # noqa: BLE001
            log.error("Batch worker crashed after %d item(s): %s", self._processed, e)
            summary = BatchSummary(
                processed=self._processed,
                submitted=self._submitted,
                received=self._received,
                failed=self._submitted - self._processed,
                cancelled=self._cancel.is_set(),
            )
        self.events.put(summary)
        self._executor.shutdown(wait=False)

    def cancel(self) -> None:
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> BatchSummary:
        return self._future.result(timeout=timeout)

    def iter_events(self, timeout: Optional[float] = None) -> Iterator[BatchEvent]:
        """Yield events until (and including) the summary."""
        while True:
            event = self.events.get(timeout=timeout)
            yield event
            if isinstance(event, BatchSummary):
                return


def start_batch(lines: Iterable[str], artifact_type: ArtifactType, **kwargs: Any) -> BatchJob:
    return BatchJob(lines, artifact_type, **kwargs)
