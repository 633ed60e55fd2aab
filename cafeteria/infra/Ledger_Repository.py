"""Ledger store: current stock projection, item definitions, categories and the
receiving / consumption event logs.

The store keeps a read-through in-memory mirror of the four durable
documents. Every mutation is applied to the mirror and immediately written
back as a whole document; `invalidate()` drops the mirror and `reload()`
re-reads it (used after bulk import or reset).

Both event logs are kept most-recent-first: new events are prepended.
"""
import copy
import json
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import uuid4

from pydantic import ValidationError

from cafeteria.domain.CategoryRegistry import CategoryRegistry
from cafeteria.domain.ConsumptionEvent import ConsumptionEvent
from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.ReceivingEvent import QualityCheck, ReceivingEvent
from cafeteria.domain.errors import ItemNotFoundError, ReceivingEventNotFoundError, StockUnderflowError
from cafeteria.events.Event_Bus import CONSUMPTION_RECORDED, GLOBAL_EVENT_BUS, RECEIVING_RECORDED, EventBus
from cafeteria.events.event_helpers import publish_ledger_event, publish_low_stock, publish_stock_clamped
from cafeteria.infra.Document_Store import DocumentStore
from cafeteria.infra.paths import CATEGORIES_DOC, CONSUMPTION_DOC, INVENTORY_DOC, RECEIVING_DOC
from cafeteria.logic.reference.tables import DEFAULT_CATEGORIES, INITIAL_INVENTORY
from cafeteria.utilities.config import APP_VERSION
from cafeteria.utilities.timeutils import parse_date
from cafeteria.utilities.validators import ImportPayload

logger = logging.getLogger(__name__)

EDITABLE_ITEM_FIELDS = ("name", "category", "unit", "min_stock", "standard_measure", "measure_weight", "code")


def _normalize_deltas(deltas) -> "OrderedDict[str, float]":
    """Accepts (id, delta) pairs or {'id'|'itemId', 'delta'} dicts; a repeated id keeps its last delta."""
    result: "OrderedDict[str, float]" = OrderedDict()
    for entry in deltas or []:
        if isinstance(entry, dict):
            item_id = entry.get("id", entry.get("itemId"))
            delta = entry.get("delta", 0)
        else:
            item_id, delta = entry
        result[str(item_id)] = float(delta)
    return result


def _sum_by_item(pairs: Iterable[Tuple[str, float]]) -> List[Tuple[str, float]]:
    totals: "OrderedDict[str, float]" = OrderedDict()
    for item_id, qty in pairs:
        totals[item_id] = totals.get(item_id, 0.0) + qty
    return list(totals.items())


class LedgerStore:
    def __init__(self, store: DocumentStore, event_bus: EventBus = GLOBAL_EVENT_BUS,
                 seed: Iterable[dict] = INITIAL_INVENTORY,
                 default_categories: Iterable[str] = DEFAULT_CATEGORIES,
                 app_version: str = APP_VERSION):
        self.store = store
        self.event_bus = event_bus
        self._seed = [dict(s) for s in seed]
        self._default_categories = list(default_categories)
        self.app_version = app_version
        self._inventory: Optional[List[InventoryItem]] = None
        self._receiving: Optional[List[ReceivingEvent]] = None
        self._consumption: Optional[List[ConsumptionEvent]] = None
        self._categories: Optional[CategoryRegistry] = None

    # --- Cache management --------------------------------------------------
    def invalidate(self):
        '''Drops the in-memory mirror; the next read goes to the durable store.'''
        self._inventory = None
        self._receiving = None
        self._consumption = None
        self._categories = None

    def reload(self):
        self.invalidate()
        self._items()
        self._receiving_log()
        self._consumption_log()
        self._registry()
        return self

    def _seed_items(self) -> List[InventoryItem]:
        items = [InventoryItem.from_dict(s) for s in copy.deepcopy(self._seed)]
        for item in items:
            item.quantity = 0.0
        return items

    def _load_list(self, name: str) -> Optional[list]:
        data = self.store.get(name)
        if data is None:
            return None
        if not isinstance(data, list):
            logger.error(f"Document '{name}' is not a list; ignoring stored value")
            return None
        return data

    def _items(self) -> List[InventoryItem]:
        if self._inventory is None:
            data = self._load_list(INVENTORY_DOC)
            if data is None:
                self._inventory = self._seed_items()
                self._persist_inventory()
            else:
                self._inventory = [InventoryItem.from_dict(d) for d in data]
        return self._inventory

    def _receiving_log(self) -> List[ReceivingEvent]:
        if self._receiving is None:
            data = self._load_list(RECEIVING_DOC) or []
            self._receiving = [ReceivingEvent.from_dict(d) for d in data]
        return self._receiving

    def _consumption_log(self) -> List[ConsumptionEvent]:
        if self._consumption is None:
            data = self._load_list(CONSUMPTION_DOC) or []
            self._consumption = [ConsumptionEvent.from_dict(d) for d in data]
        return self._consumption

    def _registry(self) -> CategoryRegistry:
        if self._categories is None:
            data = self._load_list(CATEGORIES_DOC)
            if data is None:
                self._categories = CategoryRegistry(self._default_categories)
                self._persist_categories()
            else:
                self._categories = CategoryRegistry(str(c) for c in data)
        return self._categories

    def _persist_inventory(self):
        self.store.set(INVENTORY_DOC, [i.to_dict() for i in self._items()])

    def _persist_receiving(self):
        self.store.set(RECEIVING_DOC, [e.to_dict() for e in self._receiving_log()])

    def _persist_consumption(self):
        self.store.set(CONSUMPTION_DOC, [e.to_dict() for e in self._consumption_log()])

    def _persist_categories(self):
        self.store.set(CATEGORIES_DOC, self._registry().labels())

    # --- Reads -------------------------------------------------------------
    def get_inventory(self) -> List[InventoryItem]:
        '''Returns a snapshot (copies) of the current items in insertion order.'''
        return [item.copy() for item in self._items()]

    def get_item(self, item_id: str) -> InventoryItem:
        return self._find(item_id).copy()

    def find_item_by_name(self, name: str) -> Optional[InventoryItem]:
        wanted = (name or "").strip().lower()
        for item in self._items():
            if item.name.strip().lower() == wanted:
                return item.copy()
        return None

    def get_receiving_history(self) -> List[ReceivingEvent]:
        '''Returns copies; lines are corrected only through amend_receiving_line.'''
        return [copy.deepcopy(event) for event in self._receiving_log()]

    def get_receiving_event(self, event_id: str) -> ReceivingEvent:
        return copy.deepcopy(self._find_receiving(event_id)[1])

    def get_consumption_history(self) -> List[ConsumptionEvent]:
        return list(self._consumption_log())

    def get_categories(self) -> List[str]:
        return self._registry().labels()

    def _find(self, item_id: str) -> InventoryItem:
        for item in self._items():
            if item.id == str(item_id):
                return item
        raise ItemNotFoundError(str(item_id))

    def _find_receiving(self, event_id: str) -> Tuple[int, ReceivingEvent]:
        for idx, event in enumerate(self._receiving_log()):
            if event.id == str(event_id):
                return idx, event
        raise ReceivingEventNotFoundError(str(event_id))

    # --- Stock projection --------------------------------------------------
    def apply_stock_deltas(self, deltas) -> List[InventoryItem]:
        """Clamped adjustment: each matching item becomes max(0, quantity + delta).

        Clamps are logged and published as inventory.stock_clamped; ids that
        match no item are ignored.
        """
        updates = _normalize_deltas(deltas)
        if not updates:
            return self.get_inventory()
        for item in self._items():
            delta = updates.get(item.id)
            if delta is None:
                continue
            requested = item.quantity + delta
            if item.apply_delta(delta):
                logger.warning(f"Stock for '{item.name}' clamped at 0 (requested {requested:g} {item.unit})")
                publish_stock_clamped(item, requested, bus=self.event_bus)
            if delta < 0 and item.is_low_stock:
                publish_low_stock(item, bus=self.event_bus)
        self._persist_inventory()
        return self.get_inventory()

    def apply_exact_stock_deltas(self, deltas) -> List[InventoryItem]:
        """Raw delta application; refuses the whole batch if any item would go negative."""
        updates = _normalize_deltas(deltas)
        items = {item.id: item for item in self._items()}
        missing = [item_id for item_id in updates if item_id not in items]
        if missing:
            raise ItemNotFoundError(missing[0])
        shortfalls = {items[i].name: items[i].quantity + d for i, d in updates.items() if items[i].quantity + d < 0}
        if shortfalls:
            raise StockUnderflowError(shortfalls)
        for item_id, delta in updates.items():
            item = items[item_id]
            item.apply_delta(delta)
            if delta < 0 and item.is_low_stock:
                publish_low_stock(item, bus=self.event_bus)
        self._persist_inventory()
        return self.get_inventory()

    # --- Item definitions --------------------------------------------------
    def add_item(self, definition, quantity: float = 0) -> InventoryItem:
        '''Registers a new item definition with a fresh id. No ledger event is written.'''
        data = definition.to_dict() if isinstance(definition, InventoryItem) else dict(definition)
        data.pop("id", None)
        item = InventoryItem.from_dict(data)
        item.id = uuid4().hex
        item.quantity = max(0.0, float(quantity or 0))
        self._items().append(item)
        self._persist_inventory()
        logger.info(f"Added inventory item '{item.name}' ({item.id})")
        return item.copy()

    def update_item_definition(self, item_id: str, **changes) -> List[InventoryItem]:
        unknown = set(changes) - set(EDITABLE_ITEM_FIELDS)
        if unknown:
            raise ValueError(f"Not an editable item field: {', '.join(sorted(unknown))}")
        item = self._find(item_id)
        for key, value in changes.items():
            if value is None:
                continue
            if key in ("min_stock", "measure_weight"):
                value = float(value)
            setattr(item, key, value)
        self._persist_inventory()
        return self.get_inventory()

    # --- Receiving ---------------------------------------------------------
    def record_receiving(self, event: ReceivingEvent) -> None:
        self._receiving_log().insert(0, copy.deepcopy(event))
        self._persist_receiving()
        self.apply_stock_deltas(_sum_by_item((line.item_id, line.quantity_added) for line in event.items))
        publish_ledger_event(RECEIVING_RECORDED, event, bus=self.event_bus)
        logger.info(f"Recorded receiving {event.id} from '{event.supplier}' ({len(event.items)} lines)")

    def amend_receiving_header(self, event_id: str, date: Optional[datetime] = None,
                               supplier: Optional[str] = None, invoice_number: Optional[str] = None,
                               qc_check: Optional[QualityCheck] = None) -> ReceivingEvent:
        idx, event = self._find_receiving(event_id)
        updated = event.with_header(date=date, supplier=supplier, invoice_number=invoice_number, qc_check=qc_check)
        self._receiving_log()[idx] = updated
        self._persist_receiving()
        return copy.deepcopy(updated)

    def amend_receiving_line(self, event_id: str, line_index: int, new_quantity: float,
                             new_expiration_date=None) -> float:
        """Correct one receiving line in place and apply (new - old) to the item's stock.

        The log update and the stock update succeed or fail together. Returns
        the delta that was applied.
        """
        idx, event = self._find_receiving(event_id)
        if not 0 <= line_index < len(event.items):
            raise IndexError(f"Receiving {event_id} has no line {line_index}")
        before = self._snapshot()
        line = event.items[line_index]
        delta = float(new_quantity) - line.quantity_added
        line.quantity_added = float(new_quantity)
        line.expiration_date = parse_date(new_expiration_date)
        try:
            self._persist_receiving()
            if delta != 0:
                self.apply_stock_deltas([(line.item_id, delta)])
        except Exception:
            logger.exception(f"Amending receiving {event_id} line {line_index} failed; rolling back")
            self._restore(before)
            raise
        return delta

    def _snapshot(self) -> Dict[str, list]:
        return {
            INVENTORY_DOC: [i.to_dict() for i in self._items()],
            RECEIVING_DOC: [e.to_dict() for e in self._receiving_log()],
        }

    def _restore(self, snapshot: Dict[str, list]):
        self._inventory = [InventoryItem.from_dict(d) for d in snapshot[INVENTORY_DOC]]
        self._receiving = [ReceivingEvent.from_dict(d) for d in snapshot[RECEIVING_DOC]]
        self.store.set(RECEIVING_DOC, snapshot[RECEIVING_DOC])
        self.store.set(INVENTORY_DOC, snapshot[INVENTORY_DOC])

    # --- Consumption -------------------------------------------------------
    def record_consumption(self, event: ConsumptionEvent) -> None:
        self._consumption_log().insert(0, event)
        self._persist_consumption()
        self.apply_stock_deltas(_sum_by_item((line.item_id, -line.quantity_consumed) for line in event.consumed_items))
        publish_ledger_event(CONSUMPTION_RECORDED, event, bus=self.event_bus)
        logger.info(f"Recorded consumption {event.id}: '{event.menu_name}' for {event.student_count} students")

    # --- Categories --------------------------------------------------------
    def add_category(self, name: str) -> List[str]:
        labels = self._registry().add(name)
        self._persist_categories()
        return labels

    def rename_category(self, old: str, new: str) -> List[str]:
        '''Renames a category and moves every item holding the old label to the new one.'''
        labels = self._registry().rename(old, new)
        self._persist_categories()
        touched = [item for item in self._items() if item.category == old]
        for item in touched:
            item.category = new.strip()
        if touched:
            self._persist_inventory()
        return labels

    def remove_category(self, name: str) -> List[str]:
        '''Detaches a label from future use; items keep their category string.'''
        labels = self._registry().remove(name)
        self._persist_categories()
        return labels

    # --- Bulk operations ---------------------------------------------------
    def export_all(self) -> dict:
        return {
            "inventory": [i.to_dict() for i in self._items()],
            "receiving": [e.to_dict() for e in self._receiving_log()],
            "consumption": [e.to_dict() for e in self._consumption_log()],
            "categories": self._registry().labels(),
            "meta": {
                "exportedAt": datetime.now().isoformat(),
                "appVersion": self.app_version,
            },
        }

    def export_json(self) -> str:
        return json.dumps(self.export_all(), indent=2, ensure_ascii=False)

    def import_all(self, snapshot) -> bool:
        """Replace all state with a backup document. Returns False (and writes nothing) if it is malformed."""
        try:
            payload = ImportPayload.model_validate(snapshot)
        except ValidationError as e:
            logger.error(f"Invalid backup format: {e.error_count()} error(s)")
            return False
        try:
            items = [InventoryItem.from_dict(d) for d in payload.inventory]
            receiving = [ReceivingEvent.from_dict(d) for d in payload.receiving]
            consumption = [ConsumptionEvent.from_dict(d) for d in (payload.consumption or [])]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Import failed: {e}")
            return False
        categories = payload.categories if payload.categories is not None else self._default_categories

        self.store.set(INVENTORY_DOC, [i.to_dict() for i in items])
        self.store.set(RECEIVING_DOC, [e.to_dict() for e in receiving])
        self.store.set(CONSUMPTION_DOC, [e.to_dict() for e in consumption])
        self.store.set(CATEGORIES_DOC, CategoryRegistry(categories).labels())
        self.reload()
        logger.info(f"Imported {len(items)} items, {len(receiving)} receipts, {len(consumption)} meals")
        return True

    def import_json(self, text: str) -> bool:
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Import failed: {e}")
            return False
        return self.import_all(data)

    def reset_to_seed(self) -> None:
        '''Clears both logs, restores default categories and the seed items with zero stock.'''
        self.store.delete(RECEIVING_DOC)
        self.store.delete(CONSUMPTION_DOC)
        self.store.set(CATEGORIES_DOC, CategoryRegistry(self._default_categories).labels())
        self.store.set(INVENTORY_DOC, [i.to_dict() for i in self._seed_items()])
        self.reload()
        logger.info("Ledger reset: history cleared and stock zeroed")
