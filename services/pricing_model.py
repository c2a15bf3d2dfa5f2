"""Job pricing for the services board.

Each calculator is a pure function of the job attributes and a PricingConfig.
Order of operations:
1. Base price from the service family and its sizing input.
2. Surcharges / modifiers.
3. Minimum job value floor (area-based and flat services only).
4. Platform fee folded into the subtotal.
5. Mobile money fee and VAT on that subtotal.

Unknown categorical values (service type, variant, vegetation, ...) always
fall through to a default branch; nothing here raises.
"""

from __future__ import annotations

import logging

from core.models import JobRequest, PriceBreakdown, ServiceType

from services.pricing_config import DEFAULT_PRICING_CONFIG, PricingConfig

logger = logging.getLogger("PricingCalculator")

FREE_TRAVEL_KM = 5.0
MATURE_GROWTH_SURCHARGE = 0.15
UNEVEN_TERRAIN_SURCHARGE = 0.15
TALL_TREE_HEIGHT_M = 15.0
TALL_TREE_MULTIPLIER = 1.20
TREE_CLEANUP_FEE = 200.0
DEFAULT_SERVICE_AREA_M2 = 50.0
MOVING_HELP_DEFAULT_HOURS = 4


def _travel_fee(travel_distance_km: float, config: PricingConfig) -> float:
    if travel_distance_km > FREE_TRAVEL_KM:
        return (travel_distance_km - FREE_TRAVEL_KM) * config.travel_fee_per_km
    return 0.0


def _with_fees(pre_platform_amount: float, config: PricingConfig) -> tuple[float, float, float, float]:
    """Returns (subtotal, mobile_money_fee, vat, total) for a pre-platform amount."""
    subtotal = pre_platform_amount * (1 + config.platform_fee_percentage)
    mobile_money_fee = subtotal * config.mobile_money_fee_percentage
    vat = subtotal * config.vat_percentage
    return subtotal, mobile_money_fee, vat, subtotal + mobile_money_fee + vat


def _grass_cutting_rate(area: float, config: PricingConfig) -> float:
    if area <= 150:
        return config.grass_cutting_rate_small
    if area <= 300:
        return config.grass_cutting_rate_medium
    if area <= 600:
        return config.grass_cutting_rate_large
    return config.grass_cutting_rate_commercial


def calculate_area_based_price(
    area: float,
    service_type: str,
    vegetation_type: str = "medium",
    growth_stage: str = "medium",
    terrain_type: str = "flat",
    needs_disposal: bool = False,
    travel_distance_km: float = 0.0,
    is_urgent: bool = False,
    is_recurring: bool = False,
    config: PricingConfig = DEFAULT_PRICING_CONFIG,
) -> PriceBreakdown:
    """Price grass cutting, yard clearing and gardening by area (m2).

    A zero or negative area yields a zero base price; callers must make sure an
    area was measured before quoting.
    """
    base_price = 0.0
    charges_disposal = needs_disposal and service_type == ServiceType.YARD_CLEARING

    if service_type == ServiceType.GRASS_CUTTING:
        base_price = area * _grass_cutting_rate(area, config)
        if is_recurring:
            base_price *= 1 - config.recurring_discount
    elif service_type in (ServiceType.YARD_CLEARING, ServiceType.GARDENING):
        if vegetation_type == "light":
            base_price = config.yard_clearing_light
        elif vegetation_type == "medium":
            base_price = config.yard_clearing_medium
        else:
            # heavy, overgrown and anything unrecognised
            base_price = area * config.yard_clearing_heavy_per_m2
        if charges_disposal:
            base_price += config.waste_removal_fee
    else:
        logger.warning("Area pricing requested for unsupported service type %r", service_type)

    # Surcharges are all taken off the base price and do not compound
    vegetation_surcharge = base_price * config.overgrown_grass_surcharge if vegetation_type == "overgrown" else 0.0
    growth_surcharge = base_price * MATURE_GROWTH_SURCHARGE if growth_stage == "mature" else 0.0
    if terrain_type == "sloped":
        terrain_surcharge = base_price * config.sloped_terrain_surcharge
    elif terrain_type == "uneven":
        terrain_surcharge = base_price * UNEVEN_TERRAIN_SURCHARGE
    else:
        terrain_surcharge = 0.0

    travel_fee = _travel_fee(travel_distance_km, config)
    urgency_fee = config.same_day_service_fee if is_urgent else 0.0

    pre_platform = base_price + vegetation_surcharge + growth_surcharge + terrain_surcharge + travel_fee + urgency_fee
    pre_platform = max(pre_platform, config.minimum_job_value)
    subtotal, mobile_money_fee, vat, total = _with_fees(pre_platform, config)

    breakdown = PriceBreakdown(
        base_price=base_price,
        vegetation_surcharge=vegetation_surcharge,
        growth_surcharge=growth_surcharge,
        terrain_surcharge=terrain_surcharge,
        # Already inside base_price; listed so the client sees what it paid for
        disposal_fee=config.waste_removal_fee if charges_disposal else 0.0,
        travel_fee=travel_fee,
        urgency_fee=urgency_fee,
        subtotal=subtotal,
        mobile_money_fee=mobile_money_fee,
        vat=vat,
        total_amount=total,
        estimated_hours=config.estimated_hours(service_type, area),
    )
    logger.debug("Quoted %s over %.1f m2: total=%.2f", service_type, area, total)
    return breakdown


def _tree_base_price(tree_size: str, config: PricingConfig) -> float:
    if tree_size == "small_tree":
        return config.tree_felling_small
    if tree_size == "large_tree":
        return config.tree_felling_large
    # medium_tree, palm_tree, fruit_tree and unknown sizes
    return config.tree_felling_medium


def calculate_tree_felling_price(
    tree_size: str,
    tree_height: float = 10.0,
    location_complexity: str = "normal",
    needs_stump_removal: bool = False,
    needs_cleanup: bool = True,
    travel_distance_km: float = 0.0,
    config: PricingConfig = DEFAULT_PRICING_CONFIG,
) -> PriceBreakdown:
    """Price felling a single tree.

    No minimum job value applies here. The complex-location surcharge is
    multiplied into base_price and repeated in service_surcharge for display
    only. The stump removal fee is charged but has no line of its own.
    """
    base_price = _tree_base_price(tree_size, config)
    if tree_height > TALL_TREE_HEIGHT_M:
        base_price *= TALL_TREE_MULTIPLIER

    location_surcharge = 0.0
    if location_complexity == "complex":
        location_surcharge = base_price * config.high_risk_surcharge
        base_price *= 1 + config.high_risk_surcharge

    stump_removal_fee = config.stump_removal_fee if needs_stump_removal else 0.0
    cleanup_fee = TREE_CLEANUP_FEE if needs_cleanup else 0.0
    travel_fee = _travel_fee(travel_distance_km, config)

    pre_platform = base_price + stump_removal_fee + cleanup_fee + travel_fee
    subtotal, mobile_money_fee, vat, total = _with_fees(pre_platform, config)

    logger.debug("Quoted tree felling (%s, %.1f m): total=%.2f", tree_size, tree_height, total)
    return PriceBreakdown(
        base_price=base_price,
        service_surcharge=location_surcharge,
        disposal_fee=cleanup_fee,
        travel_fee=travel_fee,
        subtotal=subtotal,
        mobile_money_fee=mobile_money_fee,
        vat=vat,
        total_amount=total,
        estimated_hours=config.estimated_hours(ServiceType.TREE_FELLING.value),
    )


def _service_base_price(
    service_type: str, service_variant: str | None, area: float | None, config: PricingConfig
) -> float:
    sized_area = area if area is not None else DEFAULT_SERVICE_AREA_M2

    if service_type == ServiceType.CLEANING:
        if service_variant == "commercial":
            return sized_area * config.cleaning_commercial_small
        return {
            "basic": config.cleaning_basic,
            "deep": config.cleaning_deep_small,
            "full_house": config.cleaning_full_house,
        }.get(service_variant, config.cleaning_basic)

    if service_type == ServiceType.PLUMBING:
        return {
            "leaking_tap": config.plumbing_minor_fix,
            "blocked_drain": config.plumbing_toilet_repair,
            "toilet_repair": config.plumbing_toilet_repair,
            "pipe_fixing": config.plumbing_pipe_replace,
        }.get(service_variant, config.plumbing_minor_fix)

    if service_type == ServiceType.ELECTRICAL:
        return {
            "socket_repair": config.electrical_socket_replace,
            "light_installation": config.electrical_light_install,
            "switch_fixing": config.electrical_socket_replace,
        }.get(service_variant, config.electrical_fault_finding)

    if service_type == ServiceType.DSTV_INSTALLATION:
        return {
            "standard": config.dstv_standard,
            "extra_large": config.dstv_extra_view,
            "dual_view": config.dstv_extra_view,
            "multi_room": config.dstv_extra_view * 1.5,
        }.get(service_variant, config.dstv_basic)

    if service_type == ServiceType.MAINTENANCE:
        return config.maintenance_basic
    if service_type == ServiceType.ERRANDS:
        return config.errand_multiple if service_variant == "multiple" else config.errand_single
    if service_type == ServiceType.FURNITURE_ASSEMBLY:
        return config.furniture_assembly
    if service_type == ServiceType.MOVING_HELP:
        return config.moving_help_per_hour * MOVING_HELP_DEFAULT_HOURS
    if service_type == ServiceType.PAINTING:
        return sized_area * config.painting_per_m2

    logger.warning("Unknown service type %r, pricing at minimum job value", service_type)
    return 0.0


def calculate_service_price(
    service_type: str,
    service_variant: str | None = None,
    area: float | None = None,
    is_urgent: bool = False,
    travel_distance_km: float = 0.0,
    config: PricingConfig = DEFAULT_PRICING_CONFIG,
) -> PriceBreakdown:
    """Price flat and variant-based services (cleaning, plumbing, DSTV, ...).

    Area is only used by commercial cleaning and painting and defaults to 50 m2.
    """
    base_price = max(_service_base_price(service_type, service_variant, area, config), config.minimum_job_value)

    travel_fee = _travel_fee(travel_distance_km, config)
    urgency_fee = config.same_day_service_fee if is_urgent else 0.0
    emergency_fee = 0.0
    if is_urgent and service_type in (ServiceType.PLUMBING, ServiceType.ELECTRICAL):
        emergency_fee = config.emergency_callout_fee

    pre_platform = base_price + travel_fee + urgency_fee + emergency_fee
    subtotal, mobile_money_fee, vat, total = _with_fees(pre_platform, config)

    logger.debug("Quoted %s (%s): total=%.2f", service_type, service_variant or "default", total)
    return PriceBreakdown(
        base_price=base_price,
        service_surcharge=emergency_fee,
        travel_fee=travel_fee,
        urgency_fee=urgency_fee,
        subtotal=subtotal,
        mobile_money_fee=mobile_money_fee,
        vat=vat,
        total_amount=total,
        estimated_hours=config.estimated_hours(service_type, area),
    )


def quote_job(request: JobRequest, config: PricingConfig = DEFAULT_PRICING_CONFIG) -> PriceBreakdown | None:
    """Routes a job request to the calculator for its service family.

    Returns None for an area-based service without a positive area.
    """
    if request.is_area_based:
        if request.area is None or request.area <= 0:
            return None
        return calculate_area_based_price(
            area=request.area,
            service_type=request.service_type,
            vegetation_type=request.vegetation_type,
            growth_stage=request.growth_stage,
            terrain_type=request.terrain_type,
            needs_disposal=request.needs_disposal,
            travel_distance_km=request.travel_distance_km,
            is_urgent=request.is_urgent,
            is_recurring=request.is_recurring,
            config=config,
        )

    if request.service_type == ServiceType.TREE_FELLING:
        return calculate_tree_felling_price(
            tree_size=request.service_variant or "medium_tree",
            tree_height=request.tree_height,
            location_complexity=request.location_complexity,
            needs_stump_removal=request.needs_stump_removal,
            needs_cleanup=request.needs_cleanup,
            travel_distance_km=request.travel_distance_km,
            config=config,
        )

    return calculate_service_price(
        service_type=request.service_type,
        service_variant=request.service_variant,
        area=request.area,
        is_urgent=request.is_urgent,
        travel_distance_km=request.travel_distance_km,
        config=config,
    )
