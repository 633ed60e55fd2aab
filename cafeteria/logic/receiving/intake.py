"""Goods-receipt intake: validate a submitted receipt, then record it in the ledger.

Validation failures never touch the ledger; they come back as an
IntakeResult with ok=False and a message for the person at the counter.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import uuid4

from pydantic import ValidationError

from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.ReceivingEvent import QualityCheck, ReceivingEvent, ReceivingLine
from cafeteria.domain.errors import ItemNotFoundError
from cafeteria.infra.Ledger_Repository import LedgerStore
from cafeteria.utilities.validators import ItemDefinitionInput, ReceivingInput

logger = logging.getLogger(__name__)

__all__ = ["IntakeResult", "submit_receiving", "create_item_definition", "validation_message"]

MISSING_FIELDS_MESSAGE = "Fill in all required fields and make sure every quantity is greater than zero."


@dataclass
class IntakeResult:
    ok: bool
    message: str
    event: Optional[ReceivingEvent] = None
    item: Optional[InventoryItem] = None


def validation_message(error: ValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for err in error.errors():
        where = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{where}: {err.get('msg')}" if where else err.get("msg", ""))
    return "; ".join(parts)


def submit_receiving(ledger: LedgerStore, payload, now: Optional[datetime] = None) -> IntakeResult:
    try:
        data = payload if isinstance(payload, ReceivingInput) else ReceivingInput.model_validate(payload)
    except ValidationError as e:
        logger.info(f"Receiving rejected: {validation_message(e)}")
        return IntakeResult(False, f"{MISSING_FIELDS_MESSAGE} ({validation_message(e)})")

    lines = []
    for line in data.items:
        try:
            item = ledger.get_item(line.item_id)
        except ItemNotFoundError as e:
            return IntakeResult(False, str(e))
        lines.append(ReceivingLine(
            item_id=item.id,
            name=item.name,
            quantity_added=line.quantity,
            expiration_date=line.expiration_date,
        ))

    event = ReceivingEvent(
        id=uuid4().hex,
        date=data.date or now or datetime.now(),
        supplier=data.supplier,
        invoice_number=data.invoice_number,
        items=lines,
        qc_check=QualityCheck(
            packaging_ok=data.qc_check.packaging_ok,
            temperature_ok=data.qc_check.temperature_ok,
            notes=data.qc_check.notes or None,
        ),
    )
    ledger.record_receiving(event)
    return IntakeResult(True, "Receiving recorded successfully!", event=event)


def create_item_definition(ledger: LedgerStore, payload) -> IntakeResult:
    """Register a new item during receiving. Its category is added to the registry if missing."""
    try:
        data = payload if isinstance(payload, ItemDefinitionInput) else ItemDefinitionInput.model_validate(payload)
    except ValidationError as e:
        return IntakeResult(False, validation_message(e))
    if ledger.find_item_by_name(data.name) is not None:
        return IntakeResult(False, f"An item named '{data.name}' already exists")
    if data.category not in ledger.get_categories():
        ledger.add_category(data.category)
    item = ledger.add_item({
        "name": data.name,
        "category": data.category,
        "unit": data.unit,
        "minStock": data.min_stock,
        "standardMeasure": data.standard_measure,
        "measureWeight": data.measure_weight,
        "code": data.code,
    })
    return IntakeResult(True, f"Item '{item.name}' created", item=item)
