"""Student segments and the unit vocabulary used by inventory items."""
from enum import Enum
from typing import Final


class Segment(str, Enum):
    INFANTIL = "Infantil"
    FUNDAMENTAL = "Fundamental"
    EJA = "EJA"

    @classmethod
    def parse(cls, value) -> "Segment":
        '''Accepts a Segment, its value or its member name (case-insensitive).'''
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for seg in cls:
            if text.lower() in (seg.value.lower(), seg.name.lower()):
                return seg
        raise ValueError(f"Unknown segment: {value!r}")


# Stock units
UNIT_KG: Final[str] = "kg"
UNIT_LITER: Final[str] = "L"
UNIT_COUNT: Final[str] = "un"
UNIT_PACK: Final[str] = "pct"
UNIT_BOX: Final[str] = "cx"

_UNIT_KINDS: Final[dict[str, str]] = {
    UNIT_KG: "mass",
    UNIT_LITER.lower(): "volume",
    UNIT_COUNT: "count",
    UNIT_PACK: "pack",
    UNIT_BOX: "box",
}


def unit_kind(unit: str) -> str:
    """Return mass, volume, count, pack, box or 'other' for a unit label."""
    return _UNIT_KINDS.get((unit or "").strip().lower(), "other")
