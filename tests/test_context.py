"""
Tests for the lookup context and browser dispatch.
"""

import os
import tempfile
import unittest
import webbrowser
from io import StringIO
from unittest.mock import MagicMock, patch

from ioc_pivot.browser import PrintingBrowser, RecordingBrowser, SystemBrowser
from ioc_pivot.context import LookupContext, open_context
from ioc_pivot.preferences import Preferences
from ioc_pivot.store import MemoryStore


def _context():
    return LookupContext.build(MemoryStore(), browser=RecordingBrowser())


class TestLookup(unittest.TestCase):
    def test_lookup_opens_and_records(self):
        ctx = _context()
        result = ctx.lookup("  8.8.8.8 ")
        self.assertTrue(result.ok)
        self.assertEqual(result.type, "ip")
        self.assertEqual(result.value, "8.8.8.8")
        self.assertEqual(ctx.browser.urls, result.urls)
        self.assertEqual(len(result.urls), len(ctx.catalog.enabled_services("ip")))
        self.assertEqual(ctx.history.records[0], result.record)

    def test_explicit_type_overrides_detection(self):
        ctx = _context()
        result = ctx.lookup("15169", "asn")
        self.assertEqual(result.type, "asn")
        self.assertEqual(result.record.type, "asn")

    def test_invalid_input_not_recorded(self):
        ctx = _context()
        result = ctx.lookup("not valid")
        self.assertFalse(result.ok)
        self.assertEqual(result.error, "invalid: unrecognized format")
        self.assertEqual(len(ctx.history), 0)
        self.assertEqual(ctx.browser.opened, [])

    def test_empty_input(self):
        result = _context().lookup("   ")
        self.assertEqual(result.classification.status, "empty")
        self.assertFalse(result.ok)

    def test_no_enabled_services_not_recorded(self):
        ctx = _context()
        for s in ctx.catalog.enabled_services("mail"):
            ctx.catalog.toggle(s.id)
        result = ctx.lookup("user@example.com")
        self.assertEqual(result.error, "no services enabled")
        self.assertEqual(len(ctx.history), 0)

    def test_background_preference_used(self):
        ctx = _context()
        ctx.update_preferences(Preferences(open_in_background=False))
        ctx.lookup("example.com")
        self.assertTrue(all(not bg for _url, bg in ctx.browser.opened))

    def test_type_required_without_auto_detect(self):
        ctx = _context()
        ctx.update_preferences(Preferences(auto_detect_type=False))
        self.assertEqual(ctx.lookup("8.8.8.8").error, "artifact type required")
        self.assertTrue(ctx.lookup("8.8.8.8", "ip").ok)
        self.assertEqual(len(ctx.history), 1)

    def test_repeat_reopens_without_recording(self):
        ctx = _context()
        record = ctx.lookup("example.com").record
        ctx.browser.opened.clear()
        urls = ctx.repeat(record)
        self.assertEqual(ctx.browser.urls, urls)
        self.assertEqual(len(ctx.history), 1)

    def test_to_dict(self):
        payload = _context().lookup("8.8.8.8").to_dict()
        self.assertEqual(payload["type"], "ip")
        self.assertIsNone(payload["error"])
        self.assertTrue(payload["record_id"])


class TestPreferencesWiring(unittest.TestCase):
    def test_history_size_follows_preferences(self):
        ctx = _context()
        for i in range(5):
            ctx.lookup(f"10.0.0.{i}")
        ctx.update_preferences(Preferences(max_history_count=2))
        self.assertEqual(ctx.history.max_size, 2)
        self.assertEqual(len(ctx.history), 2)

    def test_state_shared_through_store(self):
        store = MemoryStore()
        ctx = LookupContext.build(store, browser=RecordingBrowser())
        ctx.catalog.toggle("vt-ip")
        ctx.lookup("8.8.8.8")
        ctx.update_preferences(Preferences(max_batch_items=3))

        again = LookupContext.build(store, browser=RecordingBrowser())
        self.assertFalse(again.catalog.get("vt-ip").enabled)
        self.assertEqual(len(again.history), 1)
        self.assertEqual(again.preferences.max_batch_items, 3)

    def test_batch_defaults_from_preferences(self):
        ctx = _context()
        ctx.update_preferences(Preferences(max_batch_items=2, batch_delay_seconds=0))
        summary = ctx.run_batch(["8.8.8.8", "1.1.1.1", "9.9.9.9"], "ip")
        self.assertEqual(summary.processed, 2)
        self.assertEqual(summary.received, 3)

    def test_reset_preferences(self):
        ctx = _context()
        ctx.update_preferences(Preferences(max_batch_items=2))
        self.assertEqual(ctx.reset_preferences(), Preferences())

    def test_open_context_in_memory(self):
        ctx = open_context(":memory:", browser=RecordingBrowser())
        self.assertIsInstance(ctx.store, MemoryStore)

    def test_open_context_unusable_path_keeps_state_in_memory(self):
        with tempfile.TemporaryDirectory() as d:
            blocker = os.path.join(d, "file")
            with open(blocker, "w") as f:
                f.write("not a directory")
            with self.assertLogs("ioc_pivot.context", level="WARNING"):
                ctx = open_context(os.path.join(blocker, "state.sqlite"), browser=RecordingBrowser())
        self.assertIsInstance(ctx.store, MemoryStore)
        self.assertTrue(ctx.lookup("8.8.8.8").ok)
        self.assertEqual(len(ctx.history), 1)

    def test_open_context_sqlite(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "state.sqlite")
            open_context(path, browser=RecordingBrowser()).lookup("example.com")
            again = open_context(path, browser=RecordingBrowser())
            self.assertEqual([r.value for r in again.history.records], ["example.com"])


class TestBrowsers(unittest.TestCase):
    def test_printing_browser(self):
        stream = StringIO()
        PrintingBrowser(stream).open_all(["https://a.test/1", "https://a.test/2"])
        self.assertEqual(stream.getvalue(), "https://a.test/1\nhttps://a.test/2\n")

    @patch("ioc_pivot.browser.webbrowser.get")
    def test_system_browser_new_tab(self, mock_get):
        controller = MagicMock()
        controller.open.return_value = True
        mock_get.return_value = controller

        SystemBrowser().open("https://a.test/", in_background=True)
        controller.open.assert_called_once_with("https://a.test/", new=2, autoraise=False)

    @patch("ioc_pivot.browser.webbrowser.get")
    def test_system_browser_failure_logged(self, mock_get):
        mock_get.side_effect = webbrowser.Error("could not locate runnable browser")
        with self.assertLogs("ioc_pivot.browser", level="WARNING"):
            SystemBrowser().open("https://a.test/")


if __name__ == "__main__":
    unittest.main()
