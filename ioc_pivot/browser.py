"""Browser dispatch.

Opening a URL is fire-and-forget: failures are logged here and never
reach the lookup or batch code.
"""

from __future__ import annotations

import logging
import sys
import webbrowser
from collections.abc import Iterable
from typing import Optional, TextIO

log = logging.getLogger(__name__)


class Browser:
    """Base interface for the browser-dispatch port."""

    def open(self, url: str, in_background: bool = True) -> None:
        raise NotImplementedError

    def open_all(self, urls: Iterable[str], in_background: bool = True) -> None:
        for url in urls:
            self.open(url, in_background=in_background)


class SystemBrowser(Browser):
    """Opens URLs with the platform default browser, new tab preferred."""

    def __init__(self, name: Optional[str] = None):
        self._name = name

    def _controller(self) -> webbrowser.BaseBrowser:
        return webbrowser.get(self._name) if self._name else webbrowser.get()

    def open(self, url: str, in_background: bool = True) -> None:
        try:
            opened = self._controller().open(url, new=2, autoraise=not in_background)
        except webbrowser.Error as e:
            log.warning("No usable browser for %s: %s", url, e)
            return
        if not opened:
            log.warning("Browser refused to open %s", url)


class PrintingBrowser(Browser):
    """Writes URLs to a stream instead of launching anything."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    def open(self, url: str, in_background: bool = True) -> None:
        print(url, file=self._stream or sys.stdout)


class RecordingBrowser(Browser):
    def __init__(self) -> None:
        self.opened: list[tuple[str, bool]] = []

    def open(self, url: str, in_background: bool = True) -> None:
        self.opened.append((url, in_background))

    @property
    def urls(self) -> list[str]:
        return [url for url, _bg in self.opened]
