"""InventoryItem domain entity: stock-keeping unit with quantity, threshold and household measure."""
from typing import Optional


class InventoryItem:
    def __init__(self, id: str = "", name: str = "", category: str = "", quantity: float = 0,
                 unit: str = "", min_stock: float = 0, standard_measure: Optional[str] = None,
                 measure_weight: Optional[float] = None, code: Optional[str] = None):
        self.id = str(id)
        self.name = name
        self.category = category
        self.quantity = max(0.0, float(quantity or 0))
        self.unit = unit
        self.min_stock = float(min_stock or 0)
        self.standard_measure = standard_measure or None
        self.measure_weight = float(measure_weight) if measure_weight else None
        self.code = code or None

    def apply_delta(self, delta: float) -> bool:
        '''Adjusts the quantity by delta, flooring at zero. Returns True if the floor was hit.'''
        target = self.quantity + float(delta)
        self.quantity = max(0.0, target)
        return target < 0

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_stock

    def copy(self) -> "InventoryItem":
        return InventoryItem.from_dict(self.to_dict())

    def __eq__(self, other) -> bool:
        if not isinstance(other, InventoryItem):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __str__(self) -> str:
        parts = [f"{self.name} - {self.quantity:g} {self.unit}", f"Min: {self.min_stock:g}"]
        if self.category:
            parts.append(f"Category: {self.category}")
        if self.standard_measure and self.measure_weight:
            parts.append(f"Measure: {self.standard_measure} = {self.measure_weight:g}g")
        return " - ".join(parts)

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates an InventoryItem from its stored (camelCase) form. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        return InventoryItem(
            id=d.get("id", ""),
            name=d.get("name", ""),
            category=d.get("category", ""),
            quantity=d.get("quantity", 0),
            unit=d.get("unit", ""),
            min_stock=d.get("minStock", d.get("min_stock", 0)),
            standard_measure=d.get("standardMeasure", d.get("standard_measure")),
            measure_weight=d.get("measureWeight", d.get("measure_weight")),
            code=d.get("code"),
        )

    def to_dict(self):
        '''Converts the item to the JSON document shape used by the store and the export format.'''
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "unit": self.unit,
            "minStock": self.min_stock,
        }
        if self.standard_measure:
            data["standardMeasure"] = self.standard_measure
        if self.measure_weight:
            data["measureWeight"] = self.measure_weight
        if self.code:
            data["code"] = self.code
        return data
