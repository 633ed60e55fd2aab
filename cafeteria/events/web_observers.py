"""Alert buffer for the HTTP adapter.

Listens for inventory.low_stock and inventory.stock_clamped and keeps the
most recent alerts in memory, each tagged with an increasing cursor. Clients
poll GET /api/alerts?since=<cursor> to receive only what is new.
"""
from __future__ import annotations
import itertools
import logging
from collections import deque
from datetime import datetime
from threading import Lock
from typing import Any, Deque, Dict, List, Optional

from .Event_Bus import EventBus, GLOBAL_EVENT_BUS, INVENTORY_LOW_STOCK, INVENTORY_STOCK_CLAMPED

logger = logging.getLogger(__name__)

MAX_EVENTS = 300
ALERT_FIELDS = ('remaining', 'threshold', 'requested', 'shortfall')

_guard = Lock()
_buffer: Deque[Dict[str, Any]] = deque(maxlen=MAX_EVENTS)
_cursor = itertools.count(1)
_attached: List[EventBus] = []


def _alert_from(event_name: str, payload: Any) -> Dict[str, Any]:
    alert: Dict[str, Any] = {'type': event_name, 'ts': datetime.now().isoformat(timespec='seconds')}
    data = payload if isinstance(payload, dict) else {}
    item = data.get('item')
    if item is not None:
        alert.update(
            item_id=getattr(item, 'id', ''),
            name=getattr(item, 'name', ''),
            unit=getattr(item, 'unit', ''),
            quantity=getattr(item, 'quantity', 0),
        )
    alert.update({key: data[key] for key in ALERT_FIELDS if key in data})
    return alert


def _on_alert(event_name: str, payload: Any):
    alert = _alert_from(event_name, payload)
    with _guard:
        alert['id'] = next(_cursor)
        _buffer.append(alert)


def start(bus: Optional[EventBus] = None):
    """Attach the buffer to a bus. Calling it again for the same bus does nothing."""
    bus = bus if bus is not None else GLOBAL_EVENT_BUS
    if any(b is bus for b in _attached):
        return
    bus.subscribe(INVENTORY_LOW_STOCK, _on_alert)
    bus.subscribe(INVENTORY_STOCK_CLAMPED, _on_alert)
    _attached.append(bus)
    logger.info("Alert buffer attached to event bus")


def get_events(since: Optional[int] = None) -> Dict[str, Any]:
    """Alerts with id > since (all buffered alerts when since is None) and the cursor for the next poll."""
    with _guard:
        alerts = [a for a in _buffer if since is None or a['id'] > since]
        last = _buffer[-1]['id'] if _buffer else (since or 0)
    return {'events': alerts, 'next_cursor': last}


def clear():
    with _guard:
        _buffer.clear()


__all__ = ['start', 'get_events', 'clear', 'MAX_EVENTS']
