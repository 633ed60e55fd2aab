import unittest
from unittest import mock
from fastapi.testclient import TestClient
from cafeteria.api.api_run import app, get_ledger, set_ledger
from cafeteria.events.Event_Bus import EventBus
from cafeteria.infra.Document_Store import MemoryStore
from cafeteria.infra.Ledger_Repository import LedgerStore
from cafeteria.utilities import config


class TestCafeteriaAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)

    def setUp(self):
        set_ledger(LedgerStore(MemoryStore(), event_bus=EventBus()))

    @classmethod
    def tearDownClass(cls):
        set_ledger(None)

    def _receive_rice(self, quantity=20):
        resp = self.client.post('/api/receiving', json={
            "supplier": "Acme Foods",
            "invoice_number": "NF-1",
            "items": [{"item_id": "1", "quantity": quantity, "expiration_date": "2030-01-01"}],
        })
        self.assertEqual(resp.status_code, 200)
        return resp.json()["event"]

    def test_inventory_listing(self):
        resp = self.client.get('/api/inventory')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["count"], 14)
        for key in ('id', 'name', 'category', 'quantity', 'unit', 'minStock', 'lowStock'):
            self.assertIn(key, data["items"][0])
        resp = self.client.get('/api/inventory', params={"search": "ric"})
        self.assertEqual([i["name"] for i in resp.json()["items"]], ["Rice"])

    def test_unknown_item_is_404(self):
        self.assertEqual(self.client.get('/api/inventory/nope').status_code, 404)

    def test_receive_plan_and_confirm(self):
        self._receive_rice(20)
        body = {"segment": "Fundamental", "student_count": 100, "item_ids": ["1"]}
        plan = self.client.post('/api/plan', json=body).json()
        self.assertEqual(plan["lines"][0]["status"], "ok")
        self.assertAlmostEqual(plan["lines"][0]["needed"], 3.0)
        self.assertTrue(plan["can_confirm"])

        resp = self.client.post('/api/plan/confirm', json=body)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["event"]["menuName"], "Custom Menu")
        self.assertAlmostEqual(get_ledger().get_item("1").quantity, 17.0)

        history = self.client.get('/api/reports/consumption', params={"segment": "Fundamental"}).json()
        self.assertEqual(history["count"], 1)

    def test_plan_from_menu(self):
        resp = self.client.post('/api/plan', json={"segment": "Infantil", "student_count": 10, "menu": "m6"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["menu_name"], "Omelette with Rice")
        self.assertEqual([ln["name"] for ln in data["lines"]], ["Rice", "Oil", "Salt", "Egg"])

    def test_confirm_with_shortage_is_conflict(self):
        resp = self.client.post('/api/plan/confirm', json={"segment": "EJA", "student_count": 50, "item_ids": ["1"]})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["lacking"][0]["name"], "Rice")
        self.assertEqual(get_ledger().get_consumption_history(), [])

    def test_invalid_plan_request(self):
        resp = self.client.post('/api/plan', json={"segment": "Adults", "student_count": 10})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.post('/api/plan', json={"segment": "EJA", "student_count": 10, "menu": "nope"})
        self.assertEqual(resp.status_code, 404)

    def test_invalid_receiving(self):
        resp = self.client.post('/api/receiving', json={"supplier": "", "invoice_number": "1", "items": []})
        self.assertEqual(resp.status_code, 400)

    def test_amend_receiving_line(self):
        event = self._receive_rice(5)
        resp = self.client.put(f'/api/receiving/{event["id"]}/lines/0', json={"quantity": 10})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["delta"], 5.0)
        self.assertEqual(get_ledger().get_item("1").quantity, 10.0)
        resp = self.client.put(f'/api/receiving/{event["id"]}/lines/4', json={"quantity": 1})
        self.assertEqual(resp.status_code, 404)

    def test_amend_receiving_header(self):
        event = self._receive_rice(5)
        resp = self.client.put(f'/api/receiving/{event["id"]}', json={"supplier": "Green Farm"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["event"]["supplier"], "Green Farm")
        self.assertEqual(self.client.put('/api/receiving/nope', json={}).status_code, 404)

    def test_categories(self):
        resp = self.client.post('/api/categories', json={"name": "Frozen"})
        self.assertIn("Frozen", resp.json()["categories"])
        resp = self.client.put('/api/categories/Perishable', json={"name": "Fresh"})
        self.assertIn("Fresh", resp.json()["categories"])
        self.assertEqual(get_ledger().get_item("4").category, "Fresh")
        self.assertEqual(self.client.post('/api/categories', json={"name": "  "}).status_code, 400)

    def test_update_item_rejects_duplicate_name(self):
        resp = self.client.put('/api/inventory/2', json={"name": "Rice"})
        self.assertEqual(resp.status_code, 400)
        resp = self.client.put('/api/inventory/2', json={"min_stock": 3})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["item"]["minStock"], 3.0)

    def test_reports(self):
        self._receive_rice(25)
        balance = self.client.get('/api/reports/balance', params={"search": "rice"}).json()
        self.assertEqual(balance["rows"][0]["period_inflow"], 25.0)
        expiration = self.client.get('/api/reports/expiration').json()
        self.assertEqual(expiration["rows"][0]["name"], "Rice")
        low = self.client.get('/api/reports/low-stock').json()
        self.assertNotIn("Rice", [i["name"] for i in low["items"]])
        suppliers = self.client.get('/api/reports/suppliers').json()
        self.assertEqual(suppliers["suppliers"], ["Acme Foods"])

    def test_export_import_reset(self):
        self._receive_rice(20)
        resp = self.client.get('/api/export')
        self.assertEqual(resp.status_code, 200)
        backup = resp.json()

        self.assertEqual(self.client.post('/api/reset', json={}).status_code, 400)
        self.assertEqual(self.client.post('/api/reset', json={"confirm": True}).status_code, 200)
        self.assertEqual(get_ledger().get_item("1").quantity, 0.0)

        self.assertEqual(self.client.post('/api/import', json={"inventory": 3}).status_code, 400)
        self.assertEqual(self.client.post('/api/import', json=backup).status_code, 200)
        self.assertEqual(get_ledger().get_item("1").quantity, 20.0)

    def test_insights_without_key(self):
        with mock.patch.object(config, "OPENAI_API_KEY", ""):
            resp = self.client.post('/api/insights', json={"question": "What can we cook?"})
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["ok"])
        self.assertEqual(resp.json()["error"], "not_configured")
        self.assertEqual(self.client.post('/api/insights', json={"question": ""}).status_code, 422)

    def test_alerts_endpoint(self):
        resp = self.client.get('/api/alerts')
        self.assertEqual(resp.status_code, 200)
        self.assertIn('next_cursor', resp.json())


if __name__ == "__main__":
    unittest.main()
