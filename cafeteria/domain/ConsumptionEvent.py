"""ConsumptionEvent: one served meal. Immutable once recorded."""
from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from cafeteria.domain.Segment import Segment
from cafeteria.utilities.timeutils import format_timestamp, parse_timestamp


@dataclass(frozen=True)
class ConsumptionLine:
    item_id: str
    name: str
    quantity_consumed: float

    @staticmethod
    def from_dict(data) -> "ConsumptionLine":
        return ConsumptionLine(
            item_id=str(data.get("itemId", "")),
            name=data.get("name", ""),
            quantity_consumed=float(data.get("quantityConsumed", 0) or 0),
        )

    def to_dict(self):
        return {"itemId": self.item_id, "name": self.name, "quantityConsumed": self.quantity_consumed}


@dataclass(frozen=True)
class ConsumptionEvent:
    id: str
    date: datetime
    meal_type: str
    menu_name: str
    segment: Segment
    student_count: int
    consumed_items: Tuple[ConsumptionLine, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "date", parse_timestamp(self.date))

    @staticmethod
    def from_dict(data) -> "ConsumptionEvent":
        return ConsumptionEvent(
            id=str(data.get("id", "")),
            date=parse_timestamp(data.get("date")),
            meal_type=data.get("mealType", ""),
            menu_name=data.get("menuName", ""),
            segment=Segment.parse(data.get("segment")),
            student_count=int(data.get("studentCount", 0) or 0),
            consumed_items=tuple(ConsumptionLine.from_dict(i) for i in data.get("consumedItems", [])),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "date": format_timestamp(self.date),
            "mealType": self.meal_type,
            "menuName": self.menu_name,
            "segment": self.segment.value,
            "studentCount": self.student_count,
            "consumedItems": [line.to_dict() for line in self.consumed_items],
        }
