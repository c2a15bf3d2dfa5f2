"""Pricing configuration for the job board.

Every rate below can be tuned from the environment without a redeploy of the
calculator:
- PRICING_<FIELD_NAME>: overrides one field, e.g. PRICING_TRAVEL_FEE_PER_KM=20.
- PRICING_OVERRIDES: JSON object of field -> number, applied first, e.g.
  PRICING_OVERRIDES='{"minimum_job_value": 120, "vat_percentage": 0.16}'

Percentages are fractions in [0, 1); money is in emalangeni (E).
Bad values fall back to the defaults.
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, fields, replace
from typing import Dict, Mapping

from core.models import ServiceType

logger = logging.getLogger("PricingConfig")

ENV_PREFIX = "PRICING_"

PERCENTAGE_FIELDS = frozenset(
    {
        "platform_fee_percentage",
        "mobile_money_fee_percentage",
        "vat_percentage",
        "overgrown_grass_surcharge",
        "sloped_terrain_surcharge",
        "high_risk_surcharge",
        "recurring_discount",
        "post_construction_surcharge",
    }
)

DISPLAY_NAMES: Dict[str, str] = {
    ServiceType.GRASS_CUTTING.value: "Grass Cutting",
    ServiceType.YARD_CLEARING.value: "Yard Clearing",
    ServiceType.GARDENING.value: "Gardening",
    ServiceType.TREE_FELLING.value: "Tree Felling",
    ServiceType.CLEANING.value: "Cleaning",
    ServiceType.PLUMBING.value: "Plumbing",
    ServiceType.ELECTRICAL.value: "Electrical",
    ServiceType.DSTV_INSTALLATION.value: "DSTV Installation",
    ServiceType.MAINTENANCE.value: "Maintenance",
    ServiceType.ERRANDS.value: "Errands",
    ServiceType.FURNITURE_ASSEMBLY.value: "Furniture Assembly",
    ServiceType.MOVING_HELP.value: "Moving Help",
    ServiceType.PAINTING.value: "Painting",
}

# Hours for services whose duration does not depend on area
FIXED_HOURS: Dict[str, float] = {
    ServiceType.TREE_FELLING.value: 6.0,
    ServiceType.CLEANING.value: 3.0,
    ServiceType.PLUMBING.value: 2.0,
    ServiceType.ELECTRICAL.value: 2.0,
    ServiceType.DSTV_INSTALLATION.value: 3.0,
    ServiceType.MAINTENANCE.value: 2.0,
    ServiceType.ERRANDS.value: 1.0,
    ServiceType.FURNITURE_ASSEMBLY.value: 2.0,
    ServiceType.MOVING_HELP.value: 4.0,
}
DEFAULT_HOURS = 2.0


@dataclass(frozen=True)
class PricingConfig:
    # Platform fee is folded into the subtotal and never shown to the client
    platform_fee_percentage: float = 0.15
    mobile_money_fee_percentage: float = 0.02
    vat_percentage: float = 0.15

    # Charged per km beyond the 5 km free radius
    travel_fee_per_km: float = 15.0
    minimum_job_value: float = 100.0

    # Outdoor & yard
    grass_cutting_rate_small: float = 1.0  # <= 150 m2
    grass_cutting_rate_medium: float = 0.85  # <= 300 m2
    grass_cutting_rate_large: float = 0.73  # <= 600 m2
    grass_cutting_rate_commercial: float = 3.25  # estate/commercial, priced higher on purpose
    overgrown_grass_surcharge: float = 0.30
    sloped_terrain_surcharge: float = 0.20
    recurring_discount: float = 0.15
    yard_clearing_light: float = 350.0
    yard_clearing_medium: float = 650.0
    yard_clearing_heavy_per_m2: float = 4.0
    waste_removal_fee: float = 185.0
    same_day_service_fee: float = 100.0

    tree_felling_small: float = 2000.0
    tree_felling_medium: float = 3750.0
    tree_felling_large: float = 6250.0
    stump_removal_fee: float = 1150.0
    high_risk_surcharge: float = 0.30

    # Cleaning
    cleaning_basic: float = 275.0
    cleaning_deep_small: float = 600.0
    cleaning_full_house: float = 975.0
    cleaning_commercial_small: float = 25.0  # per m2
    post_construction_surcharge: float = 0.40

    # Technical
    dstv_basic: float = 625.0
    dstv_standard: float = 1400.0
    dstv_extra_view: float = 2500.0
    cable_extension_per_meter: float = 20.0
    decoder_relocation: float = 300.0
    tv_mounting_standard: float = 450.0
    tv_mounting_concrete: float = 600.0

    # Errands
    errand_single: float = 60.0
    errand_multiple: float = 115.0
    delivery_local: float = 85.0
    waiting_time_per_hour: float = 30.0

    plumbing_minor_fix: float = 250.0
    plumbing_toilet_repair: float = 525.0
    plumbing_pipe_replace: float = 900.0
    emergency_callout_fee: float = 200.0

    electrical_socket_replace: float = 325.0
    electrical_light_install: float = 450.0
    electrical_fault_finding: float = 600.0

    furniture_assembly: float = 200.0
    painting_per_m2: float = 30.0
    moving_help_per_hour: float = 80.0
    maintenance_basic: float = 300.0

    def __post_init__(self):
        for field in fields(self):
            problem = _check_value(field.name, getattr(self, field.name))
            if problem:
                raise ValueError(problem)

    def display_name(self, service_type: str) -> str:
        return DISPLAY_NAMES.get(service_type, "Service")

    def estimated_hours(self, service_type: str, area: float | None = None) -> float:
        """Rough job duration for display; never used in pricing."""
        if service_type == ServiceType.GRASS_CUTTING:
            if area is None or area <= 150:
                return 2.0
            if area <= 300:
                return 3.0
            if area <= 600:
                return 4.0
            return 6.0
        if service_type == ServiceType.YARD_CLEARING:
            if area is None:
                return 4.0
            if area <= 100:
                return 3.0
            if area <= 300:
                return 5.0
            return 8.0
        if service_type == ServiceType.PAINTING:
            return area / 20 if area is not None else 4.0
        return FIXED_HOURS.get(service_type, DEFAULT_HOURS)


def _check_value(name: str, value: float) -> str | None:
    if not math.isfinite(value):
        return f"{name} must be a finite number, got {value}"
    if name in PERCENTAGE_FIELDS:
        if not 0 <= value < 1:
            return f"{name} must be in [0, 1), got {value}"
    elif value < 0:
        return f"{name} must be >= 0, got {value}"
    return None


DEFAULT_PRICING_CONFIG = PricingConfig()


def _get_float_env(environ: Mapping[str, str], name: str) -> float | None:
    raw = environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _load_json_overrides(environ: Mapping[str, str]) -> Dict[str, float]:
    raw = environ.get(f"{ENV_PREFIX}OVERRIDES", "")
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring %sOVERRIDES: not valid JSON", ENV_PREFIX)
        return {}
    if not isinstance(payload, dict):
        logger.warning("Ignoring %sOVERRIDES: expected a JSON object", ENV_PREFIX)
        return {}
    cleaned: Dict[str, float] = {}
    for key, value in payload.items():
        try:
            cleaned[str(key)] = float(value)
        except (TypeError, ValueError):
            continue
    return cleaned


def load_pricing_config(environ: Mapping[str, str] | None = None) -> PricingConfig:
    """Builds a PricingConfig from the defaults plus any environment overrides."""
    if environ is None:
        environ = os.environ

    known = {field.name for field in fields(PricingConfig)}
    candidates = {name: value for name, value in _load_json_overrides(environ).items() if name in known}
    for name in known:
        value = _get_float_env(environ, f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            candidates[name] = value

    overrides: Dict[str, float] = {}
    for name, value in candidates.items():
        problem = _check_value(name, value)
        if problem:
            logger.warning("Ignoring pricing override: %s", problem)
            continue
        overrides[name] = value

    if not overrides:
        return DEFAULT_PRICING_CONFIG
    logger.info("Loaded %d pricing override(s): %s", len(overrides), ", ".join(sorted(overrides)))
    return replace(DEFAULT_PRICING_CONFIG, **overrides)
