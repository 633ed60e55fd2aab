"""Unit conversion from raw grams to stock-drawable quantities, and household-measure display."""
from typing import Optional

from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.domain.Segment import unit_kind
from cafeteria.domain.errors import MissingConversionError
from cafeteria.logic.reference.tables import HouseholdMeasure

__all__ = ["grams_per_unit", "drawable_quantity", "format_per_capita_measure", "format_total_measure"]


def grams_per_unit(item: InventoryItem, measure: Optional[HouseholdMeasure]) -> float:
    """Grams represented by one stock unit of a count/pack item.

    The household conversion wins; the item's own measure weight is the
    second source. Anything else is a configuration gap.
    """
    if measure is not None and measure.grams:
        return float(measure.grams)
    if item.measure_weight:
        return float(item.measure_weight)
    raise MissingConversionError(item.name, item.unit)


def drawable_quantity(item: InventoryItem, total_grams: float, measure: Optional[HouseholdMeasure]) -> float:
    """Convert a raw gram requirement into the item's stock unit.

    mass/volume (and any unknown unit): grams / 1000, i.e. kg or litres on a
    1:1 density assumption. count/pack: grams / grams-per-unit.
    """
    kind = unit_kind(item.unit)
    if kind in ("count", "pack"):
        if total_grams == 0:
            return 0.0
        return total_grams / grams_per_unit(item, measure)
    return total_grams / 1000


def format_per_capita_measure(grams: float, measure: Optional[HouseholdMeasure]) -> str:
    if measure is None:
        return f"{grams:g}g"
    value = grams / measure.grams
    return f"{value:.2f} {measure.unit}" if value < 0.1 else f"{value:.1f} {measure.unit}"


def format_total_measure(item: InventoryItem, total_grams: float, needed: float,
                         measure: Optional[HouseholdMeasure]) -> str:
    if measure is not None:
        return f"{total_grams / measure.grams:.1f} {measure.unit}"
    if unit_kind(item.unit) == "count":
        return f"{needed:.1f} {item.unit}"
    return f"{total_grams / 1000:.2f} kg"
