import pytest

from core.models import JobRequest, QuoteValidationError
from services.pricing_config import PricingConfig
from services.quote_service import QuoteService, validate_job_request


def test_quote_returns_breakdown_for_valid_request():
    service = QuoteService()

    breakdown = service.quote(JobRequest(service_type="grass_cutting", area=100))

    assert breakdown.total_amount == pytest.approx(134.55)


@pytest.mark.parametrize(
    "request_, message",
    [
        (JobRequest(service_type=""), "Please select a service type"),
        (JobRequest(service_type="grass_cutting"), "Please calculate the area"),
        (JobRequest(service_type="yard_clearing", area=-3), "Please calculate the area"),
    ],
)
def test_validation_messages(request_, message):
    with pytest.raises(QuoteValidationError, match=message):
        validate_job_request(request_)

    with pytest.raises(QuoteValidationError):
        QuoteService().quote(request_)


def test_flat_service_needs_no_area():
    validate_job_request(JobRequest(service_type="painting"))


def test_format_quote_contains_items_and_total():
    # Arrange
    service = QuoteService()
    breakdown = service.quote(JobRequest(service_type="plumbing", service_variant="pipe_fixing", is_urgent=True))

    # Act
    text = service.format_quote(breakdown, "plumbing")

    # Assert
    assert text.startswith("💰 **Price Breakdown: Plumbing**")
    assert "~2h" in text
    assert "Base Service: E900.00" in text
    assert "Service Variant: E200.00" in text
    assert "Urgent Job: E100.00" in text
    assert f"**TOTAL AMOUNT: {breakdown.formatted_total}**" in text
    assert text.endswith("local travel")


def test_line_items_use_service_config_rates():
    service = QuoteService(PricingConfig(vat_percentage=0.16))
    breakdown = service.quote(JobRequest(service_type="maintenance"))

    labels = [label for label, _ in service.line_items(breakdown)]

    assert "VAT (16%)" in labels


def test_starting_prices_apply_minimum_to_flat_services():
    prices = {row["service_type"]: row for row in QuoteService().starting_prices()}

    assert prices["errands"]["price"] == 100.0
    assert prices["grass_cutting"] == {
        "service_type": "grass_cutting",
        "name": "Grass Cutting",
        "price": 0.73,
        "unit": "m2",
    }
    assert prices["tree_felling"]["price"] == 2000.0
    assert prices["moving_help"]["unit"] == "hour"
    assert len(prices) == 13


def test_get_formatted_prices_contains_expected_fragments():
    # Arrange
    service = QuoteService()

    # Act
    text = service.get_formatted_prices()

    # Assert
    assert "Tree Felling: from E2000.00" in text
    assert "Painting: from E30.00 / m2" in text
    assert "Minimum job value: E100.00" in text
    assert "Travel beyond 5 km: E15.00 / km" in text
