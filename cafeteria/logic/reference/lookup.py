"""Lookup facade over the reference tables, keyed by stable ingredient code."""
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

from cafeteria.domain.Segment import Segment
from cafeteria.logic.reference import tables
from cafeteria.logic.reference.tables import HouseholdMeasure, MenuTemplate, NutritionFact


@dataclass
class ReferenceTables:
    per_capita: Dict[str, Dict[Segment, float]] = field(default_factory=dict)
    household: Dict[str, HouseholdMeasure] = field(default_factory=dict)
    yield_factors: Dict[str, float] = field(default_factory=dict)
    nutrition: Dict[str, NutritionFact] = field(default_factory=dict)
    menus: Sequence[MenuTemplate] = ()
    codes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "ReferenceTables":
        return cls(
            per_capita=dict(tables.PER_CAPITA_RULES),
            household=dict(tables.HOUSEHOLD_CONVERSION),
            yield_factors=dict(tables.YIELD_FACTORS),
            nutrition=dict(tables.NUTRITIONAL_DATA),
            menus=tuple(tables.AVAILABLE_MENUS),
            codes=dict(tables.INGREDIENT_CODES),
        )

    def resolve_code(self, item) -> Optional[str]:
        """Stable code for an item: its own code, else the display-name mapping."""
        code = getattr(item, "code", None)
        if code:
            return code
        name = (getattr(item, "name", item) or "").strip().lower()
        for display, mapped in self.codes.items():
            if display.lower() == name:
                return mapped
        return None

    def per_capita_grams(self, code: Optional[str], segment: Segment) -> float:
        return float(self.per_capita.get(code, {}).get(segment, 0) or 0)

    def household_measure(self, code: Optional[str]) -> Optional[HouseholdMeasure]:
        return self.household.get(code)

    def yield_factor(self, code: Optional[str]) -> float:
        return float(self.yield_factors.get(code) or 1)

    def nutrition_fact(self, code: Optional[str]) -> Optional[NutritionFact]:
        return self.nutrition.get(code)

    def find_menu(self, key: str) -> Optional[MenuTemplate]:
        """Find a menu template by id or (case-insensitive) name."""
        wanted = (key or "").strip().lower()
        for menu in self.menus:
            if menu.id.lower() == wanted or menu.name.lower() == wanted:
                return menu
        return None
