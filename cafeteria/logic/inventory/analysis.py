"""Inventory analysis helpers: expiration monitoring, low stock and history views."""
from __future__ import annotations
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Sequence

from cafeteria.domain.ConsumptionEvent import ConsumptionEvent
from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.ReceivingEvent import ReceivingEvent
from cafeteria.domain.Segment import Segment
from cafeteria.utilities.config import EXPIRY_CRITICAL_DAYS, EXPIRY_LOOKBACK_MONTHS
from cafeteria.utilities.constants import EXPIRY_CRITICAL, EXPIRY_EXPIRED, EXPIRY_OK
from cafeteria.utilities.timeutils import DateLike, end_bound, months_ago, start_bound

__all__ = [
    "ExpirationRow", "days_until", "classify_expiration", "compute_expiration_report", "compute_low_stock",
    "filter_consumption", "filter_receiving", "supplier_report", "list_suppliers", "recent_consumption_series",
]

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class ExpirationRow:
    item_id: str
    name: str
    supplier: str
    date_in: datetime
    date_exp: date
    days_remaining: int
    status: str

    def to_dict(self):
        return {
            'item_id': self.item_id,
            'name': self.name,
            'supplier': self.supplier,
            'date_in': self.date_in.isoformat(),
            'date_exp': self.date_exp.isoformat(),
            'days_remaining': self.days_remaining,
            'status': self.status,
        }


def days_until(expiration: date, now: datetime) -> int:
    """Whole days left, rounded up: anything later today or tomorrow counts as 1."""
    delta = datetime.combine(expiration, time.min) - now
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def classify_expiration(days_remaining: int, critical_days: int = EXPIRY_CRITICAL_DAYS) -> str:
    if days_remaining < 0:
        return EXPIRY_EXPIRED
    if days_remaining <= critical_days:
        return EXPIRY_CRITICAL
    return EXPIRY_OK


def compute_expiration_report(receiving: Sequence[ReceivingEvent], now: Optional[datetime] = None,
                              lookback_months: int = EXPIRY_LOOKBACK_MONTHS,
                              critical_days: int = EXPIRY_CRITICAL_DAYS) -> List[ExpirationRow]:
    """Every dated batch received in the lookback window, most urgent first."""
    now = now or datetime.now()
    cutoff = months_ago(now, lookback_months)
    rows: List[ExpirationRow] = []
    for event in receiving:
        if event.date < cutoff:
            continue
        for line in event.items:
            if not line.expiration_date:
                continue
            days = days_until(line.expiration_date, now)
            rows.append(ExpirationRow(
                item_id=line.item_id,
                name=line.name,
                supplier=event.supplier,
                date_in=event.date,
                date_exp=line.expiration_date,
                days_remaining=days,
                status=classify_expiration(days, critical_days),
            ))
    rows.sort(key=lambda r: r.days_remaining)
    return rows


def compute_low_stock(inventory: Sequence[InventoryItem]) -> List[Dict[str, Any]]:
    """Items at or below their minimum stock, emptiest first."""
    low = [
        {
            'item_id': item.id,
            'name': item.name,
            'quantity': item.quantity,
            'unit': item.unit,
            'min_stock': item.min_stock,
            'category': item.category,
        }
        for item in inventory if item.is_low_stock
    ]
    low.sort(key=lambda x: (x['quantity'], x['name']))
    return low


def _in_window(moment: datetime, lo: datetime, hi: datetime) -> bool:
    return lo <= moment <= hi


def filter_consumption(log: Sequence[ConsumptionEvent], start: DateLike = None, end: DateLike = None,
                       segment=None, search: Optional[str] = None) -> List[ConsumptionEvent]:
    """Meals in [start, end], optionally for one segment, matching menu or ingredient name."""
    lo, hi = start_bound(start), end_bound(end)
    seg = Segment.parse(segment) if segment else None
    needle = (search or '').strip().lower()
    result = []
    for event in log:
        if not _in_window(event.date, lo, hi):
            continue
        if seg is not None and event.segment != seg:
            continue
        if needle and needle not in event.menu_name.lower() \
                and not any(needle in line.name.lower() for line in event.consumed_items):
            continue
        result.append(event)
    return result


def filter_receiving(log: Sequence[ReceivingEvent], start: DateLike = None, end: DateLike = None,
                     search: Optional[str] = None) -> List[ReceivingEvent]:
    """Receipts in [start, end] matching supplier, invoice number or item name."""
    lo, hi = start_bound(start), end_bound(end)
    needle = (search or '').strip().lower()
    result = []
    for event in log:
        if not _in_window(event.date, lo, hi):
            continue
        if needle and needle not in event.supplier.lower() \
                and needle not in event.invoice_number.lower() \
                and not any(needle in line.name.lower() for line in event.items):
            continue
        result.append(event)
    return result


def list_suppliers(log: Sequence[ReceivingEvent]) -> List[str]:
    return sorted({event.supplier for event in log})


def supplier_report(log: Sequence[ReceivingEvent], start: DateLike = None, end: DateLike = None,
                    supplier: Optional[str] = None) -> List[Dict[str, Any]]:
    """One row per delivered line in the window, optionally for a single supplier."""
    lo, hi = start_bound(start), end_bound(end)
    rows = []
    for event in log:
        if not _in_window(event.date, lo, hi):
            continue
        if supplier and event.supplier != supplier:
            continue
        for line in event.items:
            rows.append({
                'supplier': event.supplier,
                'invoice_number': event.invoice_number,
                'date': event.date.isoformat(),
                'item_id': line.item_id,
                'name': line.name,
                'quantity': line.quantity_added,
                'expiration_date': line.expiration_date.isoformat() if line.expiration_date else None,
                'packaging_ok': event.qc_check.packaging_ok,
                'temperature_ok': event.qc_check.temperature_ok,
            })
    return rows


def recent_consumption_series(log: Sequence[ConsumptionEvent], limit: int = 7) -> List[Dict[str, Any]]:
    """Chart data for the latest meals in chronological order (log is most-recent-first)."""
    latest = sorted(log, key=lambda e: e.date, reverse=True)[:limit]
    return [
        {
            'date': event.date.date().isoformat(),
            'students': event.student_count,
            'menu': event.menu_name,
        }
        for event in reversed(latest)
    ]
