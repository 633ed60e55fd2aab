"""Historical balance reconstruction.

Opening stock is not stored anywhere; it is derived by running the
conservation equation backwards from the current stock:

    current = opening + in_since_start - out_since_start

Events are scanned once each (no per-item rescans) and the log order does
not matter.
"""
from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from cafeteria.domain.ConsumptionEvent import ConsumptionEvent
from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.ReceivingEvent import ReceivingEvent
from cafeteria.utilities.timeutils import DateLike, end_bound, start_bound

__all__ = ["BalanceRow", "reconstruct_balance"]


@dataclass(frozen=True)
class BalanceRow:
    item_id: str
    name: str
    unit: str
    opening_stock: float
    period_inflow: float
    period_outflow: float
    current_stock: float

    def to_dict(self):
        return {
            'item_id': self.item_id,
            'name': self.name,
            'unit': self.unit,
            'opening_stock': self.opening_stock,
            'period_inflow': self.period_inflow,
            'period_outflow': self.period_outflow,
            'current_stock': self.current_stock,
        }


class _Flow:
    __slots__ = ('in_since_start', 'out_since_start', 'in_period', 'out_period')

    def __init__(self):
        self.in_since_start = 0.0
        self.out_since_start = 0.0
        self.in_period = 0.0
        self.out_period = 0.0


def reconstruct_balance(inventory: Sequence[InventoryItem], receiving: Sequence[ReceivingEvent],
                        consumption: Sequence[ConsumptionEvent], start: DateLike = None, end: DateLike = None,
                        search: Optional[str] = None) -> List[BalanceRow]:
    """Per-item opening stock, inflow and outflow for [start, end].

    start None means the beginning of time, end None means no upper bound;
    a date-only end covers that whole day. `search` filters rows by a
    case-insensitive substring of the item name.
    """
    lo, hi = start_bound(start), end_bound(end)
    flows: Dict[str, _Flow] = defaultdict(_Flow)

    for event in receiving:
        if event.date < lo:
            continue
        in_period = event.date <= hi
        for line in event.items:
            flow = flows[line.item_id]
            flow.in_since_start += line.quantity_added
            if in_period:
                flow.in_period += line.quantity_added

    for event in consumption:
        if event.date < lo:
            continue
        in_period = event.date <= hi
        for line in event.consumed_items:
            flow = flows[line.item_id]
            flow.out_since_start += line.quantity_consumed
            if in_period:
                flow.out_period += line.quantity_consumed

    needle = (search or '').strip().lower()
    rows: List[BalanceRow] = []
    for item in inventory:
        if needle and needle not in item.name.lower():
            continue
        flow = flows.get(item.id) or _Flow()
        opening = item.quantity - flow.in_since_start + flow.out_since_start
        rows.append(BalanceRow(
            item_id=item.id,
            name=item.name,
            unit=item.unit,
            # clamp hides float drift and stock that was floored at zero in the past
            opening_stock=max(0.0, opening),
            period_inflow=flow.in_period,
            period_outflow=flow.out_period,
            current_stock=item.quantity,
        ))
    return rows
