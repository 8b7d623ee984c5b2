"""Wire models for the Palletizer API. Lengths are millimetres, weights are grams."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from palletizer.units import inches_to_mm, pounds_to_grams


class WireModel(BaseModel):
    """Base for every payload: immutable once built, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# Request side
# ---------------------------------------------------------------------------

class Carton(WireModel):
    """A carton type to pack; `quantity` identical copies are sent to the server."""

    id: str = Field(description="Carton identifier")
    length: float = Field(description="Length in mm")
    width: float = Field(description="Width in mm")
    height: float = Field(description="Height in mm")
    weight: float = Field(description="Weight in grams")
    quantity: int = Field(description="Number of identical cartons")
    fragile: bool = Field(default=False, description="Whether the carton is fragile")
    allow_rotation: bool = Field(default=False, description="Whether the carton may be rotated")

    @classmethod
    def from_imperial(
        cls,
        carton_id: str,
        length_in: float,
        width_in: float,
        height_in: float,
        weight_lb: float,
        quantity: int = 1,
        fragile: bool = False,
        allow_rotation: bool = False,
    ) -> "Carton":
        """Build a carton from inches and pounds."""
        return cls(
            id=carton_id,
            length=inches_to_mm(length_in),
            width=inches_to_mm(width_in),
            height=inches_to_mm(height_in),
            weight=pounds_to_grams(weight_lb),
            quantity=quantity,
            fragile=fragile,
            allow_rotation=allow_rotation,
        )


class PackingConstraints(WireModel):
    """Envelope of one pallet."""

    max_length: float = Field(description="Maximum length in mm")
    max_width: float = Field(description="Maximum width in mm")
    max_height: float = Field(description="Maximum height in mm")
    max_weight: float = Field(description="Maximum weight in grams")


class PackingOptions(WireModel):
    support_percentage: float = Field(
        default=0.0,
        description="Minimum supported base area (0-100) for a stable placement",
    )


class PackingRequest(WireModel):
    """Body of POST /api/v1/pack."""

    cartons: list[Carton] = Field(default_factory=list)
    packing_constraints: PackingConstraints
    packing_options: PackingOptions = Field(default_factory=PackingOptions)

    def total_quantity(self) -> int:
        return sum(c.quantity for c in self.cartons)


# ---------------------------------------------------------------------------
# Response side. Every field has a zero default: the server omits empty values.
# ---------------------------------------------------------------------------

class Point3D(WireModel):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Dimensions(WireModel):
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0


class PlacedCarton(WireModel):
    """A carton as placed by the server (dimensions are post-rotation)."""

    carton_id: str = ""
    position: Point3D = Field(default_factory=Point3D)
    dimensions: Dimensions = Field(default_factory=Dimensions)
    orientation: str = ""
    weight: float = 0.0
    layer: int = Field(default=0, description="Layer number (0-based)")


class Pallet(WireModel):
    pallet_id: int = 0
    total_weight: float = 0.0
    total_height: float = 0.0
    utilization_percentage: float = 0.0
    cartons: list[PlacedCarton] = Field(default_factory=list)
    center_of_gravity: Point3D = Field(default_factory=Point3D)


class PackingSummary(WireModel):
    total_pallets: int = 0
    total_cartons_packed: int = 0
    average_utilization: float = 0.0
    computation_time_ms: int = 0


class PackingResponse(WireModel):
    """
    Body returned by POST /api/v1/pack.

    `error` may be populated on a 200 response; the client returns such a
    response as-is and callers are expected to check it.
    """

    pallets: list[Pallet] = Field(default_factory=list)
    summary: PackingSummary = Field(default_factory=PackingSummary)
    error: str = ""

    @model_serializer(mode="wrap")
    def _omit_empty_error(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        if not data.get("error"):
            data.pop("error", None)
        return data


class HealthResponse(WireModel):
    status: str = ""


class MetricsResponse(WireModel):
    """Service-side counters reported by GET /metrics."""

    total_requests: int = 0
    total_cartons: int = 0
    total_pallets: int = 0
    average_time_ms: float = 0.0
    average_util_pct: float = 0.0
    success_rate: float = 0.0
    uptime_seconds: int = 0
    memory_alloc_mb: float = 0.0
    memory_sys_mb: float = 0.0
    num_goroutines: int = 0
    num_gc: int = 0
    last_gc_pause_ms: float = 0.0
    go_version: str = ""
    build_version: str = ""
    build_time: str = ""
