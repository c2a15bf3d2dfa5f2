import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping


class QuoteValidationError(ValueError):
    """Raised when a job request cannot be quoted as submitted."""


class ServiceType(str, Enum):
    GRASS_CUTTING = "grass_cutting"
    YARD_CLEARING = "yard_clearing"
    GARDENING = "gardening"
    TREE_FELLING = "tree_felling"
    CLEANING = "cleaning"
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    DSTV_INSTALLATION = "dstv_installation"
    MAINTENANCE = "maintenance"
    ERRANDS = "errands"
    FURNITURE_ASSEMBLY = "furniture_assembly"
    MOVING_HELP = "moving_help"
    PAINTING = "painting"


AREA_BASED_SERVICES = frozenset(
    {ServiceType.GRASS_CUTTING.value, ServiceType.YARD_CLEARING.value, ServiceType.GARDENING.value}
)

# Selectable variants per service, in menu order
SERVICE_VARIANTS: dict[str, list[tuple[str, str]]] = {
    ServiceType.PLUMBING.value: [
        ("leaking_tap", "🚰 Leaking Tap"),
        ("blocked_drain", "🚽 Blocked Drain"),
        ("toilet_repair", "🚿 Toilet Repair"),
        ("pipe_fixing", "🔧 Pipe Fixing"),
        ("water_heater", "♨️ Water Heater"),
    ],
    ServiceType.ELECTRICAL.value: [
        ("socket_repair", "🔌 Socket Repair"),
        ("light_installation", "💡 Light Installation"),
        ("switch_fixing", "🎚️ Switch Fixing"),
        ("wiring", "⚡ Wiring"),
        ("circuit_breaker", "🔋 Circuit Breaker"),
    ],
    ServiceType.DSTV_INSTALLATION.value: [
        ("standard", "📺 Standard"),
        ("extra_large", "📺 Extra Large"),
        ("dual_view", "📺 Dual View"),
        ("multi_room", "📺 Multi-room"),
    ],
    ServiceType.TREE_FELLING.value: [
        ("small_tree", "🌱 Small Tree (<30cm)"),
        ("medium_tree", "🌳 Medium Tree (30-60cm)"),
        ("large_tree", "🌲 Large Tree (>60cm)"),
        ("palm_tree", "🌴 Palm Tree"),
        ("fruit_tree", "🍎 Fruit Tree"),
    ],
}


def service_variants(service_type: str) -> list[tuple[str, str]]:
    """Returns (variant_id, label) pairs for a service; empty when it has no variants."""
    return list(SERVICE_VARIANTS.get(service_type, []))


def format_amount(amount: float) -> str:
    return f"E{amount:.2f}"


@dataclass(frozen=True)
class PriceBreakdown:
    base_price: float = 0.0
    vegetation_surcharge: float = 0.0
    growth_surcharge: float = 0.0
    terrain_surcharge: float = 0.0
    # Tree felling: complex-location amount already inside base_price (display only).
    # Plumbing/electrical: emergency call-out fee.
    service_surcharge: float = 0.0
    # Waste removal for yard clearing, cleanup for tree felling
    disposal_fee: float = 0.0
    travel_fee: float = 0.0
    urgency_fee: float = 0.0
    # Platform fee included, never broken out
    subtotal: float = 0.0
    mobile_money_fee: float = 0.0
    vat: float = 0.0
    total_amount: float = 0.0
    estimated_hours: float = 0.0

    @property
    def formatted_total(self) -> str:
        return format_amount(self.total_amount)

    @property
    def formatted_estimated_time(self) -> str:
        return f"~{int(self.estimated_hours)}h"

    def detailed_breakdown(
        self, mobile_money_fee_percentage: float = 0.02, vat_percentage: float = 0.15
    ) -> list[tuple[str, str]]:
        """Label/amount rows for display.

        Optional items appear only when non-zero; subtotal and total are always present.
        """
        optional_items = [
            ("Base Service", self.base_price),
            ("Vegetation Type", self.vegetation_surcharge),
            ("Growth Stage", self.growth_surcharge),
            ("Terrain Type", self.terrain_surcharge),
            ("Service Variant", self.service_surcharge),
            ("Waste Removal", self.disposal_fee),
            ("Travel Distance", self.travel_fee),
            ("Urgent Job", self.urgency_fee),
        ]
        rows = [(label, format_amount(amount)) for label, amount in optional_items if amount > 0]

        rows.append(("Subtotal", format_amount(self.subtotal)))
        if self.mobile_money_fee > 0:
            label = f"Mobile Money Fee ({_percent(mobile_money_fee_percentage)})"
            rows.append((label, format_amount(self.mobile_money_fee)))
        if self.vat > 0:
            rows.append((f"VAT ({_percent(vat_percentage)})", format_amount(self.vat)))
        rows.append(("TOTAL AMOUNT", format_amount(self.total_amount)))
        return rows

    def to_job_fields(self) -> dict[str, float]:
        """Flat fields as stored on a job record."""
        return {field.name: getattr(self, field.name) for field in fields(self)}

    @classmethod
    def from_job_fields(cls, record: Mapping[str, Any]) -> "PriceBreakdown":
        values = {}
        for field in fields(cls):
            raw = record.get(field.name)
            if isinstance(raw, (int, float)) and not isinstance(raw, bool):
                values[field.name] = float(raw)
            else:
                values[field.name] = 0.0
        return cls(**values)


def _percent(fraction: float) -> str:
    return f"{fraction * 100:g}%"


# camelCase keys sent by the mobile client
_PAYLOAD_ALIASES = {
    "serviceType": "service_type",
    "serviceVariant": "service_variant",
    "areaSqM": "area",
    "estimatedArea": "area",
    "estimated_area": "area",
    "vegetationType": "vegetation_type",
    "growthStage": "growth_stage",
    "terrainType": "terrain_type",
    "needsDisposal": "needs_disposal",
    "isUrgent": "is_urgent",
    "isRecurring": "is_recurring",
    "travelDistanceKm": "travel_distance_km",
    "treeHeight": "tree_height",
    "locationComplexity": "location_complexity",
    "needsStumpRemoval": "needs_stump_removal",
    "needsCleanup": "needs_cleanup",
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


@dataclass(frozen=True)
class JobRequest:
    service_type: str
    service_variant: str | None = None
    area: float | None = None
    vegetation_type: str = "medium"
    growth_stage: str = "medium"
    terrain_type: str = "flat"
    needs_disposal: bool = False
    is_urgent: bool = False
    is_recurring: bool = False
    travel_distance_km: float = 0.0
    tree_height: float = 10.0
    location_complexity: str = "normal"
    needs_stump_removal: bool = False
    needs_cleanup: bool = True

    @property
    def is_area_based(self) -> bool:
        return self.service_type in AREA_BASED_SERVICES

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "JobRequest":
        """Builds a request from a JSON payload using snake_case or camelCase keys.

        Unknown keys are ignored and null values keep the field default.
        """
        names = {field.name for field in fields(cls)}
        values: dict[str, Any] = {}
        for key, raw in payload.items():
            name = _PAYLOAD_ALIASES.get(key, key)
            if name not in names or raw is None:
                continue
            values[name] = _coerce(name, raw)

        service_type = values.pop("service_type", "")
        return cls(service_type=service_type, **values)


_FLOAT_FIELDS = {"area", "travel_distance_km", "tree_height"}
_BOOL_FIELDS = {"needs_disposal", "is_urgent", "is_recurring", "needs_stump_removal", "needs_cleanup"}


def _coerce(name: str, raw: Any) -> Any:
    if name in _FLOAT_FIELDS:
        if isinstance(raw, bool):
            raise QuoteValidationError(f"Invalid number for {name}: {raw!r}")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise QuoteValidationError(f"Invalid number for {name}: {raw!r}") from None
        if not math.isfinite(value):
            raise QuoteValidationError(f"Invalid number for {name}: {raw!r}")
        return value
    if name in _BOOL_FIELDS:
        if isinstance(raw, str):
            flag = raw.strip().lower()
            if flag in _TRUE_STRINGS:
                return True
            if flag in _FALSE_STRINGS:
                return False
            raise QuoteValidationError(f"Invalid flag for {name}: {raw!r}")
        return bool(raw)
    return str(raw).strip()
