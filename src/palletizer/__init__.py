"""Python client for the Palletizer carton packing API."""

from palletizer.async_client import AsyncPalletizerClient
from palletizer.client import PalletizerClient
from palletizer.config import DEFAULT_API_URL, ClientSettings
from palletizer.errors import (
    ApplicationError,
    DecodeError,
    PalletizerError,
    RequestCancelledError,
    RequestTimeoutError,
    TransportError,
)
from palletizer.models import (
    Carton,
    Dimensions,
    HealthResponse,
    MetricsResponse,
    PackingConstraints,
    PackingOptions,
    PackingRequest,
    PackingResponse,
    PackingSummary,
    Pallet,
    PlacedCarton,
    Point3D,
)
from palletizer.pallets import get_pallet_constraints, standard_pallet, standard_pallet_4048
from palletizer.units import grams_to_pounds, inches_to_mm, mm_to_inches, pounds_to_grams

__all__ = [
    "DEFAULT_API_URL",
    "ApplicationError",
    "AsyncPalletizerClient",
    "Carton",
    "ClientSettings",
    "DecodeError",
    "Dimensions",
    "HealthResponse",
    "MetricsResponse",
    "PackingConstraints",
    "PackingOptions",
    "PackingRequest",
    "PackingResponse",
    "PackingSummary",
    "Pallet",
    "PalletizerClient",
    "PalletizerError",
    "PlacedCarton",
    "Point3D",
    "RequestCancelledError",
    "RequestTimeoutError",
    "TransportError",
    "get_pallet_constraints",
    "grams_to_pounds",
    "inches_to_mm",
    "mm_to_inches",
    "pounds_to_grams",
    "standard_pallet",
    "standard_pallet_4048",
]
