"""Plain-text rendering of a PackingResponse for terminals and logs."""

from __future__ import annotations

from palletizer.models import PackingResponse
from palletizer.units import grams_to_pounds, mm_to_inches


def format_summary(response: PackingResponse, imperial: bool = False) -> str:
    """
    Render the summary block followed by one line per pallet.

    Weights and lengths come off the wire in g/mm; `imperial=True` shows lb/in.
    """
    summary = response.summary
    if imperial:
        weight_unit, length_unit = "lb", "in"
        to_weight, to_length = grams_to_pounds, mm_to_inches
    else:
        weight_unit, length_unit = "kg", "mm"
        to_weight, to_length = (lambda g: g / 1000.0), (lambda mm: mm)

    lines = [
        "📦 Packing Complete",
        f"Pallets: {summary.total_pallets}",
        f"Cartons Packed: {summary.total_cartons_packed}",
        f"Average Utilization: {summary.average_utilization:.1f}%",
        f"Computation Time: {summary.computation_time_ms} ms",
    ]

    for pallet in response.pallets:
        cog = pallet.center_of_gravity
        lines.append(
            f"  Pallet {pallet.pallet_id}: {len(pallet.cartons)} cartons, "
            f"{to_weight(pallet.total_weight):.1f} {weight_unit}, "
            f"height {to_length(pallet.total_height):.1f} {length_unit}, "
            f"{pallet.utilization_percentage:.1f}% used, "
            f"CoG ({to_length(cog.x):.1f}, {to_length(cog.y):.1f}, {to_length(cog.z):.1f}) {length_unit}"
        )

    if response.error:
        lines.append(f"⚠️ Service reported: {response.error}")

    return "\n".join(lines)
