"""Meal planning engine.

Turns a segment, a headcount and a selection of inventory items into a
MealPlan: how much of each item the meal draws from stock, whether stock
covers it, household-measure hints for the kitchen and a per-student
nutrition estimate. Nothing is written until `confirm`, which hands a
ConsumptionEvent to the ledger.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence
from uuid import uuid4

from cafeteria.domain.ConsumptionEvent import ConsumptionEvent, ConsumptionLine
from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.Segment import Segment
from cafeteria.domain.errors import PlanNotConfirmableError
from cafeteria.infra.Ledger_Repository import LedgerStore
from cafeteria.logic.planning.measures import drawable_quantity, format_per_capita_measure, format_total_measure
from cafeteria.logic.reference.lookup import ReferenceTables
from cafeteria.logic.reporting.nutrition import Nutrients, estimate_per_student, sum_nutrients
from cafeteria.utilities.constants import CUSTOM_MENU_NAME, DEFAULT_MEAL_TYPE, STATUS_LACK, STATUS_OK

logger = logging.getLogger(__name__)


@dataclass
class PlannedUtensil:
    name: str
    quantity: int = 1
    available: bool = True


@dataclass(frozen=True)
class PlanLine:
    item: InventoryItem
    per_capita_grams: float
    total_grams: float
    needed: float
    stock: float
    status: str
    per_capita_measure: str
    total_measure: str
    nutrition_per_student: Nutrients

    @property
    def unit(self) -> str:
        return self.item.unit

    def to_dict(self):
        return {
            'item_id': self.item.id,
            'name': self.item.name,
            'unit': self.item.unit,
            'per_capita_grams': self.per_capita_grams,
            'total_grams': self.total_grams,
            'needed': self.needed,
            'stock': self.stock,
            'status': self.status,
            'per_capita_measure': self.per_capita_measure,
            'total_measure': self.total_measure,
            'nutrition_per_student': self.nutrition_per_student.to_dict(),
        }


@dataclass
class MealPlan:
    segment: Segment
    student_count: int
    lines: List[PlanLine] = field(default_factory=list)
    menu_name: Optional[str] = None
    utensils: List[PlannedUtensil] = field(default_factory=list)

    @property
    def totals(self) -> Nutrients:
        """Per-student nutrition for the whole meal (kcal whole, macros one decimal)."""
        return sum_nutrients(line.nutrition_per_student for line in self.lines).rounded()

    @property
    def has_shortage(self) -> bool:
        return any(line.status != STATUS_OK for line in self.lines)

    @property
    def lacking(self) -> List[PlanLine]:
        return [line for line in self.lines if line.status != STATUS_OK]

    @property
    def can_confirm(self) -> bool:
        return bool(self.lines) and not self.has_shortage

    @property
    def missing_utensils(self) -> List[PlannedUtensil]:
        return [u for u in self.utensils if not u.available]

    def to_dict(self):
        return {
            'segment': self.segment.value,
            'student_count': self.student_count,
            'menu_name': self.menu_name or CUSTOM_MENU_NAME,
            'lines': [line.to_dict() for line in self.lines],
            'totals': self.totals.to_dict(),
            'has_shortage': self.has_shortage,
            'can_confirm': self.can_confirm,
            'utensils': [{'name': u.name, 'quantity': u.quantity, 'available': u.available} for u in self.utensils],
        }


def apply_template(selection: Sequence[InventoryItem], template_ingredients: Iterable[str],
                   inventory: Sequence[InventoryItem]) -> List[InventoryItem]:
    """Merge the inventory items named by a template into the selection.

    Existing entries are kept, duplicates (by id) skipped and template names
    with no matching inventory item ignored. Inventory order is preserved
    for the added items.
    """
    wanted = {name.strip().lower() for name in template_ingredients}
    merged = list(selection)
    chosen = {item.id for item in merged}
    for item in inventory:
        if item.name.strip().lower() in wanted and item.id not in chosen:
            merged.append(item)
            chosen.add(item.id)
    return merged


def add_to_selection(selection: Sequence[InventoryItem], item: InventoryItem) -> List[InventoryItem]:
    if any(current.id == item.id for current in selection):
        return list(selection)
    return list(selection) + [item]


class PlanningEngine:
    def __init__(self, ledger: LedgerStore, tables: Optional[ReferenceTables] = None):
        self.ledger = ledger
        self.tables = tables or ReferenceTables.default()

    # --- Selection helpers -------------------------------------------------
    def apply_menu(self, selection: Sequence[InventoryItem], menu_key: str) -> List[InventoryItem]:
        '''Applies a named menu template (by id or name) to the current selection.'''
        menu = self.tables.find_menu(menu_key)
        if menu is None:
            raise KeyError(f"Unknown menu template: {menu_key}")
        return apply_template(selection, menu.ingredients, self.ledger.get_inventory())

    def select_items(self, item_ids: Iterable[str]) -> List[InventoryItem]:
        selection: List[InventoryItem] = []
        for item_id in item_ids:
            selection = add_to_selection(selection, self.ledger.get_item(item_id))
        return selection

    # --- Calculation -------------------------------------------------------
    def compute_line(self, item: InventoryItem, segment: Segment, student_count: int) -> PlanLine:
        code = self.tables.resolve_code(item)
        per_capita = self.tables.per_capita_grams(code, segment)
        total_grams = per_capita * student_count
        measure = self.tables.household_measure(code)
        needed = drawable_quantity(item, total_grams, measure)
        status = STATUS_LACK if needed > item.quantity else STATUS_OK
        nutrition = estimate_per_student(per_capita, self.tables.nutrition_fact(code), self.tables.yield_factor(code))
        return PlanLine(
            item=item,
            per_capita_grams=per_capita,
            total_grams=total_grams,
            needed=needed,
            stock=item.quantity,
            status=status,
            per_capita_measure=format_per_capita_measure(per_capita, measure),
            total_measure=format_total_measure(item, total_grams, needed, measure),
            nutrition_per_student=nutrition,
        )

    def compute_plan(self, segment, student_count: int, items: Sequence[InventoryItem],
                     menu_name: Optional[str] = None,
                     utensils: Optional[Iterable[PlannedUtensil]] = None) -> MealPlan:
        """Compute the plan against current stock. An empty headcount or selection gives an empty plan."""
        segment = Segment.parse(segment)
        plan = MealPlan(segment=segment, student_count=int(student_count or 0), menu_name=menu_name,
                        utensils=list(utensils or []))
        if plan.student_count <= 0 or not items:
            return plan
        stock = {item.id: item for item in self.ledger.get_inventory()}
        for selected in items:
            current = stock.get(selected.id, selected)
            plan.lines.append(self.compute_line(current, segment, plan.student_count))
        return plan

    # --- Confirmation ------------------------------------------------------
    def confirm(self, plan: MealPlan, meal_type: str = DEFAULT_MEAL_TYPE,
                now: Optional[datetime] = None) -> ConsumptionEvent:
        """Record the plan as a consumption event. All lines must be ok; there is no partial confirm."""
        if not plan.lines:
            raise PlanNotConfirmableError("The plan has no ingredients")
        if plan.has_shortage:
            raise PlanNotConfirmableError("Insufficient stock for: " + ", ".join(ln.item.name for ln in plan.lacking),
                                          lacking=plan.lacking)
        # Stock may have moved since the plan was computed
        current = {item.id: item.quantity for item in self.ledger.get_inventory()}
        stale = [line for line in plan.lines if line.needed > current.get(line.item.id, 0)]
        if stale:
            raise PlanNotConfirmableError("Stock changed since the plan was computed: "
                                          + ", ".join(ln.item.name for ln in stale), lacking=stale)

        event = ConsumptionEvent(
            id=uuid4().hex,
            date=now or datetime.now(),
            meal_type=meal_type,
            menu_name=plan.menu_name or CUSTOM_MENU_NAME,
            segment=plan.segment,
            student_count=plan.student_count,
            consumed_items=tuple(
                ConsumptionLine(item_id=line.item.id, name=line.item.name, quantity_consumed=line.needed)
                for line in plan.lines
            ),
        )
        self.ledger.record_consumption(event)
        logger.info(f"Confirmed plan '{event.menu_name}' for {plan.student_count} students ({plan.segment.value})")
        return event
