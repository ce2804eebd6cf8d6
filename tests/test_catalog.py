"""
Tests for the lookup-service catalog.
"""

import json
import unittest

from ioc_pivot.catalog import ServiceCatalog, default_services
from ioc_pivot.models import ARTIFACT_TYPES, LookupService
from ioc_pivot.store import CATALOG_KEY, MemoryStore


class TestDefaultServices(unittest.TestCase):
    def test_every_category_has_services(self):
        services = default_services()
        for category in ARTIFACT_TYPES:
            with self.subTest(category=category):
                self.assertTrue(any(s.category == category for s in services))

    def test_ids_unique_and_templates_have_one_placeholder(self):
        services = default_services()
        ids = [s.id for s in services]
        self.assertEqual(len(ids), len(set(ids)))
        for s in services:
            with self.subTest(service=s.id):
                self.assertEqual(s.url_template.count("{value}"), 1)

    def test_returns_fresh_list(self):
        first = default_services()
        first.clear()
        self.assertTrue(default_services())

    def test_order_starts_with_virustotal(self):
        catalog = ServiceCatalog(MemoryStore())
        self.assertEqual(catalog.all_services("ip")[0].id, "vt-ip")
        self.assertEqual(catalog.all_services("sha256")[0].id, "vt-file")


class TestOwnership(unittest.TestCase):
    def test_services_cannot_be_changed_from_outside(self):
        catalog = ServiceCatalog(MemoryStore())
        count = len(catalog.services)
        self.assertIsInstance(catalog.services, tuple)
        listed = catalog.all_services("ip")
        listed.clear()
        self.assertEqual(len(catalog.services), count)
        self.assertTrue(catalog.all_services("ip"))
        with self.assertRaises(AttributeError):
            catalog.services = ()

    def test_seed_services_argument(self):
        seed = [LookupService("only", "Only", "https://only.test/{value}", "domain")]
        catalog = ServiceCatalog(MemoryStore(), seed)
        seed.clear()
        self.assertEqual([s.id for s in catalog.services], ["only"])
        self.assertEqual(catalog.all_services("ip"), [])


class TestToggle(unittest.TestCase):
    def test_toggle_flips_and_persists(self):
        store = MemoryStore()
        catalog = ServiceCatalog.load(store)
        self.assertTrue(catalog.get("shodan").enabled)

        updated = catalog.toggle("shodan")
        self.assertFalse(updated.enabled)
        self.assertNotIn("shodan", [s.id for s in catalog.enabled_services("ip")])

        saved = json.loads(store.load(CATALOG_KEY))
        self.assertIs(saved["shodan"], False)

        reloaded = ServiceCatalog.load(store)
        self.assertFalse(reloaded.get("shodan").enabled)

    def test_toggle_twice_restores(self):
        catalog = ServiceCatalog.load(MemoryStore())
        catalog.toggle("vt-ip")
        catalog.toggle("vt-ip")
        self.assertTrue(catalog.get("vt-ip").enabled)

    def test_toggle_unknown_is_noop(self):
        store = MemoryStore()
        catalog = ServiceCatalog.load(store)
        before = list(catalog.services)
        self.assertIsNone(catalog.toggle("no-such-service"))
        self.assertEqual(list(catalog.services), before)
        self.assertIsNone(store.load(CATALOG_KEY))

    def test_toggle_keeps_position(self):
        catalog = ServiceCatalog.load(MemoryStore())
        ids = [s.id for s in catalog.all_services("ip")]
        catalog.toggle("gn-ip")
        self.assertEqual([s.id for s in catalog.all_services("ip")], ids)


class TestLoadAndReset(unittest.TestCase):
    def test_unknown_ids_ignored_missing_keep_default(self):
        store = MemoryStore()
        store.save(CATALOG_KEY, json.dumps({"ghost": False, "spamhaus-ip": True}).encode())
        catalog = ServiceCatalog.load(store)
        self.assertIsNone(catalog.get("ghost"))
        self.assertTrue(catalog.get("spamhaus-ip").enabled)
        self.assertTrue(catalog.get("vt-ip").enabled)
        self.assertFalse(catalog.get("joe-sandbox").enabled)

    def test_corrupt_payload_falls_back_to_defaults(self):
        store = MemoryStore()
        store.save(CATALOG_KEY, b"{not json")
        with self.assertLogs("ioc_pivot.catalog.registry", level="WARNING"):
            catalog = ServiceCatalog.load(store)
        self.assertEqual(list(catalog.services), default_services())

    def test_non_dict_payload_ignored(self):
        store = MemoryStore()
        store.save(CATALOG_KEY, b"[1, 2, 3]")
        with self.assertLogs("ioc_pivot.catalog.registry", level="WARNING"):
            catalog = ServiceCatalog.load(store)
        self.assertEqual(list(catalog.services), default_services())

    def test_reset_restores_defaults(self):
        store = MemoryStore()
        catalog = ServiceCatalog.load(store)
        catalog.toggle("vt-ip")
        catalog.toggle("joe-sandbox")
        catalog.reset_to_defaults()
        self.assertEqual(list(catalog.services), default_services())
        self.assertEqual(list(ServiceCatalog.load(store).services), default_services())


class TestStatistics(unittest.TestCase):
    def test_counts_per_category(self):
        catalog = ServiceCatalog.load(MemoryStore())
        stats = catalog.statistics()
        for category in ARTIFACT_TYPES:
            with self.subTest(category=category):
                self.assertEqual(stats[category], len(catalog.enabled_services(category)))
                self.assertEqual(stats[f"{category}_total"], len(catalog.all_services(category)))

        catalog.toggle("vt-ip")
        self.assertEqual(catalog.statistics()["ip"], stats["ip"] - 1)


if __name__ == "__main__":
    unittest.main()
