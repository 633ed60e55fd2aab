import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from cafeteria.events.Event_Bus import EventBus
from cafeteria.infra.Document_Store import JsonFileStore, MemoryStore
from cafeteria.infra.Ledger_Repository import LedgerStore
from cafeteria.utilities.timeutils import EPOCH, end_bound, parse_timestamp


class TestJsonFileStore(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.store = JsonFileStore(self.data_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def test_set_get_delete(self):
        self.assertIsNone(self.store.get("inventory"))
        self.store.set("inventory", [{"id": "1", "name": "Feijão"}])
        self.assertEqual(self.store.get("inventory"), [{"id": "1", "name": "Feijão"}])
        self.assertEqual(sorted(p.name for p in self.data_dir.iterdir()), ["inventory.json"])
        self.store.delete("inventory")
        self.assertIsNone(self.store.get("inventory"))

    def test_corrupt_document_reads_as_missing(self):
        (self.data_dir / "receiving.json").write_text("{broken", encoding="utf-8")
        with self.assertLogs("cafeteria.infra.Document_Store", level="ERROR"):
            self.assertIsNone(self.store.get("receiving"))

    def test_ledger_survives_restart(self):
        LedgerStore(self.store, event_bus=EventBus()).apply_stock_deltas([("1", 7)])
        reopened = LedgerStore(JsonFileStore(self.data_dir), event_bus=EventBus())
        self.assertEqual(reopened.get_item("1").quantity, 7.0)


class TestMemoryStore(unittest.TestCase):

    def test_values_are_copied(self):
        store = MemoryStore()
        doc = [{"id": "1"}]
        store.set("inventory", doc)
        doc[0]["id"] = "2"
        store.get("inventory")[0]["id"] = "3"
        self.assertEqual(store.get("inventory"), [{"id": "1"}])


class TestTimestamps(unittest.TestCase):

    def test_unreadable_timestamp_is_epoch(self):
        self.assertEqual(parse_timestamp(None), EPOCH)
        self.assertEqual(parse_timestamp("yesterday"), EPOCH)

    def test_microseconds_survive(self):
        moment = datetime(2024, 3, 1, 9, 30, 15, 123456)
        self.assertEqual(parse_timestamp(moment.isoformat()), moment)

    def test_date_only_end_bound(self):
        self.assertEqual(end_bound("2024-02-10"), datetime(2024, 2, 10, 23, 59, 59, 999999))


if __name__ == "__main__":
    unittest.main()
