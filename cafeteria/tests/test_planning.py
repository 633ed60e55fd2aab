import unittest
from datetime import datetime
from cafeteria.domain.Segment import Segment
from cafeteria.domain.errors import MissingConversionError, PlanNotConfirmableError
from cafeteria.events.Event_Bus import EventBus
from cafeteria.infra.Document_Store import MemoryStore
from cafeteria.infra.Ledger_Repository import LedgerStore
from cafeteria.logic.planning.engine import PlannedUtensil, PlanningEngine, apply_template
from cafeteria.logic.planning.measures import drawable_quantity, format_per_capita_measure
from cafeteria.logic.reference.tables import HouseholdMeasure
from cafeteria.logic.reporting.nutrition import Nutrients, estimate_per_student
from cafeteria.logic.reference.tables import NutritionFact
from cafeteria.utilities.constants import CUSTOM_MENU_NAME, STATUS_LACK, STATUS_OK


class TestPlanningEngine(unittest.TestCase):

    def setUp(self):
        self.ledger = LedgerStore(MemoryStore(), event_bus=EventBus())
        self.engine = PlanningEngine(self.ledger)

    def test_rice_for_one_hundred_students(self):
        self.ledger.apply_stock_deltas([("1", 20)])
        items = self.engine.select_items(["1"])
        plan = self.engine.compute_plan(Segment.FUNDAMENTAL, 100, items)
        line = plan.lines[0]
        self.assertEqual(line.per_capita_grams, 30)
        self.assertEqual(line.total_grams, 3000)
        self.assertAlmostEqual(line.needed, 3.0)
        self.assertEqual(line.status, STATUS_OK)
        self.assertEqual(line.per_capita_measure, "0.2 Tea Cup(s)")
        self.assertEqual(line.total_measure, "16.7 Tea Cup(s)")
        # 30 g raw rice -> 111 g cooked
        self.assertAlmostEqual(line.nutrition_per_student.kcal, 142.08)
        self.assertEqual(plan.totals.kcal, 142)
        self.assertTrue(plan.can_confirm)

        event = self.engine.confirm(plan, now=datetime(2024, 3, 4, 11, 30))
        self.assertEqual(event.menu_name, CUSTOM_MENU_NAME)
        self.assertEqual(event.segment, Segment.FUNDAMENTAL)
        self.assertAlmostEqual(event.consumed_items[0].quantity_consumed, 3.0)
        self.assertAlmostEqual(self.ledger.get_item("1").quantity, 17.0)
        self.assertEqual(self.ledger.get_consumption_history()[0].id, event.id)

    def test_shortage_blocks_confirmation(self):
        self.ledger.apply_stock_deltas([("1", 2)])
        plan = self.engine.compute_plan("EJA", 100, self.engine.select_items(["1"]))
        self.assertEqual(plan.lines[0].status, STATUS_LACK)
        self.assertFalse(plan.can_confirm)
        with self.assertRaises(PlanNotConfirmableError) as ctx:
            self.engine.confirm(plan)
        self.assertEqual([ln.item.id for ln in ctx.exception.lacking], ["1"])
        self.assertEqual(self.ledger.get_consumption_history(), [])
        self.assertEqual(self.ledger.get_item("1").quantity, 2.0)

    def test_stale_plan_is_refused(self):
        self.ledger.apply_stock_deltas([("1", 5)])
        plan = self.engine.compute_plan("Fundamental", 100, self.engine.select_items(["1"]))
        self.ledger.apply_stock_deltas([("1", -4)])
        with self.assertRaises(PlanNotConfirmableError):
            self.engine.confirm(plan)
        self.assertEqual(self.ledger.get_item("1").quantity, 1.0)

    def test_empty_plans(self):
        items = self.engine.select_items(["1"])
        self.assertEqual(self.engine.compute_plan("Infantil", 0, items).lines, [])
        plan = self.engine.compute_plan("Infantil", 30, [])
        self.assertFalse(plan.can_confirm)
        with self.assertRaises(PlanNotConfirmableError):
            self.engine.confirm(plan)

    def test_apply_menu_merges_without_duplicates(self):
        selection = self.engine.select_items(["1"])
        merged = self.engine.apply_menu(selection, "m2")
        self.assertEqual([i.name for i in merged], ["Rice", "Chicken", "Oil", "Salt"])
        again = self.engine.apply_menu(merged, "Chicken and Rice")
        self.assertEqual(len(again), 4)
        with self.assertRaises(KeyError):
            self.engine.apply_menu(selection, "m99")

    def test_template_ignores_names_without_inventory_item(self):
        inventory = self.ledger.get_inventory()
        merged = apply_template([], ["Watermelon", "Banana"], inventory)
        self.assertEqual([i.name for i in merged], ["Banana"])

    def test_egg_is_counted_in_units(self):
        plan = self.engine.compute_plan("Infantil", 30, self.engine.select_items(["10"]))
        line = plan.lines[0]
        self.assertAlmostEqual(line.needed, 30.0)
        self.assertEqual(line.total_measure, "30.0 Unit(s)")
        self.assertEqual(line.status, STATUS_LACK)

    def test_count_item_without_conversion_raises(self):
        item = self.ledger.add_item({"name": "Watermelon", "category": "Perishable", "unit": "un"})
        with self.assertRaises(MissingConversionError):
            self.engine.compute_plan("Fundamental", 10, [item])

    def test_count_item_with_measure_weight(self):
        item = self.ledger.add_item({"name": "Watermelon", "category": "Perishable", "unit": "un",
                                     "measureWeight": 2000})
        plan = self.engine.compute_plan("Fundamental", 10, [item])
        self.assertAlmostEqual(plan.lines[0].needed, 1.0)

    def test_item_without_rules_needs_nothing(self):
        item = self.ledger.add_item({"name": "Detergent", "category": "Cleaning", "unit": "un"})
        plan = self.engine.compute_plan("Fundamental", 10, [item])
        self.assertEqual(plan.lines[0].needed, 0.0)
        self.assertEqual(plan.lines[0].status, STATUS_OK)

    def test_missing_utensils_reported_but_not_blocking(self):
        self.ledger.apply_stock_deltas([("11", 50)])
        plan = self.engine.compute_plan("Fundamental", 10, self.engine.select_items(["11"]),
                                        utensils=[PlannedUtensil("Blender", 1, False)])
        self.assertEqual([u.name for u in plan.missing_utensils], ["Blender"])
        self.assertTrue(plan.can_confirm)


class TestMeasures(unittest.TestCase):

    def test_per_capita_measure_precision(self):
        spoon = HouseholdMeasure("Teaspoon(s)", 50)
        self.assertEqual(format_per_capita_measure(2, spoon), "0.04 Teaspoon(s)")
        self.assertEqual(format_per_capita_measure(10, spoon), "0.2 Teaspoon(s)")
        self.assertEqual(format_per_capita_measure(15, None), "15g")

    def test_zero_grams_skips_conversion(self):
        from cafeteria.domain.InventoryItem import InventoryItem
        item = InventoryItem("x", "Mystery", unit="un")
        self.assertEqual(drawable_quantity(item, 0, None), 0.0)


class TestNutrition(unittest.TestCase):

    def test_yield_factor_scales_raw_grams(self):
        fact = NutritionFact(100, 10, 20, 1)
        result = estimate_per_student(50, fact, 2)
        self.assertEqual(result, Nutrients(100, 10, 20, 1))

    def test_missing_fact_is_zero(self):
        self.assertEqual(estimate_per_student(50, None), Nutrients())

    def test_rounding(self):
        self.assertEqual(Nutrients(142.6, 2.76, 31.2, 0.22).rounded(), Nutrients(143, 2.8, 31.2, 0.2))


if __name__ == "__main__":
    unittest.main()
