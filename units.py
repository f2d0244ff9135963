"""
Measurement units used by recipes and stock.

Units are free text. `normalize_unit` folds spellings onto a short code and
`convert_unit` looks the pair up in a flat factor table. There is no unit
algebra: only the pairs listed in UNIT_CONVERSIONS convert.
"""
from typing import Dict, Optional

COUNT_UNITS = ("pcs", "buah", "butir", "lembar", "botol")

UNIT_ALIASES: Dict[str, str] = {
    "kilogram": "kg",
    "gram": "g",
    "liter": "l",
    "litre": "l",
    "milliliter": "ml",
    "millilitre": "ml",
    "piece": "pcs",
    "pieces": "pcs",
}

# source unit -> target unit -> multiplier
UNIT_CONVERSIONS: Dict[str, Dict[str, float]] = {
    # weight
    "kg": {"g": 1000, "kg": 1},
    "g": {"kg": 0.001, "g": 1},
    # volume
    "l": {"ml": 1000, "l": 1},
    "ml": {"l": 0.001, "ml": 1},
    "liter": {"ml": 1000, "milliliter": 1000, "liter": 1, "l": 1},
    "milliliter": {"liter": 0.001, "l": 0.001, "ml": 1, "milliliter": 1},
    # counted units only match themselves
    **{u: {u: 1} for u in COUNT_UNITS},
}


def normalize_unit(unit: Optional[str]) -> str:
    unit_lower = (unit or "").strip().lower()
    return UNIT_ALIASES.get(unit_lower, unit_lower)


def convert_unit(value: float, from_unit: str, to_unit: str) -> Optional[float]:
    """Convert `value` from one unit to another.

    Returns None when the table has no factor for the pair, e.g. `buah` to
    `pcs` or `kg` to `ml`. Callers decide what to do with that.
    """
    src = normalize_unit(from_unit)
    dst = normalize_unit(to_unit)

    if src == dst:
        return value

    factor = UNIT_CONVERSIONS.get(src, {}).get(dst)
    if factor is None:
        return None
    return value * factor
