import logging

from core.models import JobRequest, PriceBreakdown, QuoteValidationError, ServiceType, format_amount

from services.pricing_config import DEFAULT_PRICING_CONFIG, PricingConfig
from services.pricing_model import FREE_TRAVEL_KM, quote_job

logger = logging.getLogger("QuoteService")

QUOTE_FOOTER = "💡 Price includes labor, basic equipment, and local travel"


def validate_job_request(request: JobRequest) -> None:
    """Checks the fields the calculators need but do not enforce."""
    if not request.service_type:
        raise QuoteValidationError("Please select a service type")
    if request.is_area_based and (request.area is None or request.area <= 0):
        raise QuoteValidationError("Please calculate the area")


class QuoteService:
    def __init__(self, config: PricingConfig = DEFAULT_PRICING_CONFIG):
        self.config = config

    def quote(self, request: JobRequest) -> PriceBreakdown:
        validate_job_request(request)
        breakdown = quote_job(request, self.config)
        logger.info("Quote for %s: %s", request.service_type, breakdown.formatted_total)
        return breakdown

    def line_items(self, breakdown: PriceBreakdown) -> list[tuple[str, str]]:
        return breakdown.detailed_breakdown(
            mobile_money_fee_percentage=self.config.mobile_money_fee_percentage,
            vat_percentage=self.config.vat_percentage,
        )

    def format_quote(self, breakdown: PriceBreakdown, service_type: str) -> str:
        lines = [
            f"💰 **Price Breakdown: {self.config.display_name(service_type)}**",
            f"⏱ {breakdown.formatted_estimated_time}",
            "",
        ]
        for label, amount in self.line_items(breakdown):
            if label.startswith("TOTAL"):
                lines.append(f"**{label}: {amount}**")
            else:
                lines.append(f"{label}: {amount}")
        lines.extend(["", QUOTE_FOOTER])
        return "\n".join(lines)

    def starting_prices(self) -> list[dict]:
        """Lowest base price per service, before travel, fees and VAT."""
        cfg = self.config

        def flat(amount: float) -> float:
            return max(amount, cfg.minimum_job_value)

        rows = [
            (ServiceType.GRASS_CUTTING, min(cfg.grass_cutting_rate_small, cfg.grass_cutting_rate_medium,
                                            cfg.grass_cutting_rate_large), "m2"),
            (ServiceType.YARD_CLEARING, cfg.yard_clearing_light, None),
            (ServiceType.GARDENING, cfg.yard_clearing_light, None),
            (ServiceType.TREE_FELLING, cfg.tree_felling_small, None),
            (ServiceType.CLEANING, flat(cfg.cleaning_basic), None),
            (ServiceType.PLUMBING, flat(cfg.plumbing_minor_fix), None),
            (ServiceType.ELECTRICAL, flat(min(cfg.electrical_socket_replace, cfg.electrical_light_install,
                                              cfg.electrical_fault_finding)), None),
            (ServiceType.DSTV_INSTALLATION, flat(cfg.dstv_basic), None),
            (ServiceType.MAINTENANCE, flat(cfg.maintenance_basic), None),
            (ServiceType.ERRANDS, flat(cfg.errand_single), None),
            (ServiceType.FURNITURE_ASSEMBLY, flat(cfg.furniture_assembly), None),
            (ServiceType.MOVING_HELP, cfg.moving_help_per_hour, "hour"),
            (ServiceType.PAINTING, cfg.painting_per_m2, "m2"),
        ]
        return [
            {
                "service_type": service_type.value,
                "name": cfg.display_name(service_type.value),
                "price": price,
                "unit": unit,
            }
            for service_type, price, unit in rows
        ]

    def get_formatted_prices(self) -> str:
        lines = ["💰 **Our prices**", ""]
        for row in self.starting_prices():
            unit = f" / {row['unit']}" if row["unit"] else ""
            lines.append(f"• {row['name']}: from {format_amount(row['price'])}{unit}")
        lines.extend(
            [
                "",
                f"Minimum job value: {format_amount(self.config.minimum_job_value)}",
                f"Travel beyond {FREE_TRAVEL_KM:g} km: {format_amount(self.config.travel_fee_per_km)} / km",
                "Mobile money fee and VAT are added at checkout.",
            ]
        )
        return "\n".join(lines)
