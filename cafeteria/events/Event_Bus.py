"""In-process publish/subscribe for ledger and stock notifications.

Event names and payloads:
  inventory.low_stock          {"item": InventoryItem, "remaining": float, "threshold": float}
  inventory.stock_clamped      {"item": InventoryItem, "requested": float, "shortfall": float}
  ledger.receiving_recorded    {"event": ReceivingEvent}
  ledger.consumption_recorded  {"event": ConsumptionEvent}

Listeners are called synchronously as listener(event_name, payload), in
subscription order.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]

INVENTORY_LOW_STOCK = "inventory.low_stock"
INVENTORY_STOCK_CLAMPED = "inventory.stock_clamped"
RECEIVING_RECORDED = "ledger.receiving_recorded"
CONSUMPTION_RECORDED = "ledger.consumption_recorded"


class EventBus:
	def __init__(self):
		self._listeners: Dict[str, List[Listener]] = {}

	def subscribe(self, event_name: str, listener: Listener):
		'''Registers a listener; subscribing the same callable twice has no effect.'''
		bucket = self._listeners.setdefault(event_name, [])
		if listener not in bucket:
			bucket.append(listener)

	def unsubscribe(self, event_name: str, listener: Listener):
		bucket = self._listeners.get(event_name, [])
		if listener in bucket:
			bucket.remove(listener)

	def listeners(self, event_name: str) -> List[Listener]:
		return list(self._listeners.get(event_name, []))

	def publish(self, event_name: str, payload: Any):
		for listener in self.listeners(event_name):
			try:
				listener(event_name, payload)
			except Exception:
				logger.exception("Listener %r failed on %s", listener, event_name)


# Process-wide bus used when no other bus is injected
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'Listener',
	'INVENTORY_LOW_STOCK', 'INVENTORY_STOCK_CLAMPED', 'RECEIVING_RECORDED', 'CONSUMPTION_RECORDED'
]
