# src/palletizer/pallets.py
from __future__ import annotations

from palletizer.models import PackingConstraints
from palletizer.units import inches_to_mm, pounds_to_grams

# Pallet envelopes in imperial units: (length_in, width_in, height_in, max_weight_lb).
PALLET_PRESETS_IN: dict[str, tuple[float, float, float, float]] = {
    "STANDARD": (40, 72, 48, 1500),
    "40X72":    (40, 72, 48, 1500),  # alias
    "4048":     (40, 48, 48, 1500),
    "40X48":    (40, 48, 48, 1500),  # alias
}

# Converted values are rounded so presets compare equal to their published mm/g figures.
_DECIMALS = 3


def _constraints(length_in: float, width_in: float, height_in: float, weight_lb: float) -> PackingConstraints:
    return PackingConstraints(
        max_length=round(inches_to_mm(length_in), _DECIMALS),
        max_width=round(inches_to_mm(width_in), _DECIMALS),
        max_height=round(inches_to_mm(height_in), _DECIMALS),
        max_weight=round(pounds_to_grams(weight_lb), _DECIMALS),
    )


def standard_pallet() -> PackingConstraints:
    """40 x 72 x 48 in pallet, 1500 lb -> 1016.0 x 1828.8 x 1219.2 mm, 680388.0 g."""
    return _constraints(*PALLET_PRESETS_IN["STANDARD"])


def standard_pallet_4048() -> PackingConstraints:
    """40 x 48 x 48 in pallet, 1500 lb -> 1016.0 x 1219.2 x 1219.2 mm, 680388.0 g."""
    return _constraints(*PALLET_PRESETS_IN["4048"])


def get_pallet_constraints(preset: str) -> PackingConstraints:
    key = preset.strip().upper()
    if key not in PALLET_PRESETS_IN:
        raise ValueError(f"Unknown pallet_preset '{preset}'. Valid: {sorted(PALLET_PRESETS_IN.keys())}")
    return _constraints(*PALLET_PRESETS_IN[key])
