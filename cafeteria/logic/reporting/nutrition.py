"""Nutrition estimates for planned meals.

Per-capita targets are raw grams while the nutrition table describes the
food as eaten, so raw grams are scaled by the yield factor first.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from cafeteria.logic.reference.tables import NutritionFact


@dataclass(frozen=True)
class Nutrients:
    kcal: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    def __add__(self, other: "Nutrients") -> "Nutrients":
        return Nutrients(
            self.kcal + other.kcal,
            self.protein + other.protein,
            self.carbs + other.carbs,
            self.fat + other.fat,
        )

    def rounded(self) -> "Nutrients":
        """kcal to a whole number, macros to one decimal."""
        return Nutrients(round(self.kcal), round(self.protein, 1), round(self.carbs, 1), round(self.fat, 1))

    def to_dict(self):
        return {'kcal': self.kcal, 'protein': self.protein, 'carbs': self.carbs, 'fat': self.fat}


ZERO = Nutrients()


def estimate_per_student(raw_grams: float, fact: Optional[NutritionFact], yield_factor: float = 1) -> Nutrients:
    """Nutrients one student gets from raw_grams of an ingredient; zero when the ingredient has no fact."""
    if fact is None or not fact.reference_amount:
        return ZERO
    edible_grams = raw_grams * (yield_factor or 1)
    ratio = edible_grams / fact.reference_amount
    return Nutrients(fact.kcal * ratio, fact.protein * ratio, fact.carbs * ratio, fact.fat * ratio)


def sum_nutrients(values: Iterable[Nutrients]) -> Nutrients:
    total = ZERO
    for value in values:
        total = total + value
    return total


__all__ = ["Nutrients", "estimate_per_student", "sum_nutrients"]
