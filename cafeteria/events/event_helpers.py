"""Event helper utilities.

Publish inventory-related events on a bus (the global one by default).

Quick import:
    from cafeteria.events.event_helpers import (
        publish_low_stock, publish_stock_clamped, publish_ledger_event
    )
"""
from __future__ import annotations
from typing import Any, Optional
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    INVENTORY_LOW_STOCK, INVENTORY_STOCK_CLAMPED
)

__all__ = ['publish_low_stock', 'publish_stock_clamped', 'publish_ledger_event']


def _bus(bus: Optional[EventBus]) -> EventBus:
    return bus if bus is not None else GLOBAL_EVENT_BUS


def publish_low_stock(item: Any, bus: Optional[EventBus] = None):
    """Publish an inventory.low_stock event."""
    _bus(bus).publish(INVENTORY_LOW_STOCK, {
        'item': item,
        'remaining': item.quantity,
        'threshold': item.min_stock
    })


def publish_stock_clamped(item: Any, requested: float, bus: Optional[EventBus] = None):
    """Publish an inventory.stock_clamped event.

    `requested` is the quantity the delta would have produced (negative);
    the shortfall is the amount silently dropped by the floor at zero.
    """
    _bus(bus).publish(INVENTORY_STOCK_CLAMPED, {
        'item': item,
        'requested': requested,
        'shortfall': -requested
    })


def publish_ledger_event(event_name: str, event: Any, bus: Optional[EventBus] = None):
    _bus(bus).publish(event_name, {'event': event})
