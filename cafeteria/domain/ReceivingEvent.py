"""ReceivingEvent: one inbound shipment (header, line items and quality check)."""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import List, Optional

from cafeteria.utilities.timeutils import format_timestamp, parse_date, parse_timestamp


@dataclass
class QualityCheck:
    packaging_ok: bool = True
    temperature_ok: bool = True
    notes: Optional[str] = None

    @staticmethod
    def from_dict(data) -> "QualityCheck":
        d = data if isinstance(data, dict) else {}
        return QualityCheck(
            packaging_ok=bool(d.get("packagingOk", True)),
            temperature_ok=bool(d.get("temperatureOk", True)),
            notes=d.get("notes") or None,
        )

    def to_dict(self):
        data = {"packagingOk": self.packaging_ok, "temperatureOk": self.temperature_ok}
        if self.notes:
            data["notes"] = self.notes
        return data


@dataclass
class ReceivingLine:
    item_id: str
    name: str
    quantity_added: float
    expiration_date: Optional[date] = None

    @staticmethod
    def from_dict(data) -> "ReceivingLine":
        return ReceivingLine(
            item_id=str(data.get("itemId", "")),
            name=data.get("name", ""),
            quantity_added=float(data.get("quantityAdded", 0) or 0),
            expiration_date=parse_date(data.get("expirationDate")),
        )

    def to_dict(self):
        data = {"itemId": self.item_id, "name": self.name, "quantityAdded": self.quantity_added}
        if self.expiration_date:
            data["expirationDate"] = self.expiration_date.isoformat()
        return data


@dataclass
class ReceivingEvent:
    id: str
    date: datetime
    supplier: str
    invoice_number: str
    items: List[ReceivingLine] = field(default_factory=list)
    qc_check: QualityCheck = field(default_factory=QualityCheck)

    def __post_init__(self):
        self.date = parse_timestamp(self.date)

    def with_header(self, **changes) -> "ReceivingEvent":
        '''Returns a copy with header fields replaced; line items are untouched.'''
        allowed = {"date", "supplier", "invoice_number", "qc_check"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Not a receiving header field: {', '.join(sorted(unknown))}")
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @staticmethod
    def from_dict(data) -> "ReceivingEvent":
        return ReceivingEvent(
            id=str(data.get("id", "")),
            date=parse_timestamp(data.get("date")),
            supplier=data.get("supplier", ""),
            invoice_number=data.get("invoiceNumber", ""),
            items=[ReceivingLine.from_dict(i) for i in data.get("items", [])],
            qc_check=QualityCheck.from_dict(data.get("qcCheck")),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "date": format_timestamp(self.date),
            "supplier": self.supplier,
            "invoiceNumber": self.invoice_number,
            "items": [line.to_dict() for line in self.items],
            "qcCheck": self.qc_check.to_dict(),
        }
