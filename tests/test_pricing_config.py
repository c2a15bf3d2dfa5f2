import dataclasses

import pytest

from services.pricing_config import DEFAULT_PRICING_CONFIG, PricingConfig, load_pricing_config


def test_defaults_without_overrides():
    config = load_pricing_config({})

    assert config is DEFAULT_PRICING_CONFIG
    assert config.platform_fee_percentage == 0.15
    assert config.mobile_money_fee_percentage == 0.02
    assert config.minimum_job_value == 100.0


def test_field_override_from_env():
    # Arrange
    env_values = {"PRICING_TRAVEL_FEE_PER_KM": "20", "PRICING_MINIMUM_JOB_VALUE": "150.5"}

    # Act
    config = load_pricing_config(env_values)

    # Assert
    assert config.travel_fee_per_km == 20.0
    assert config.minimum_job_value == 150.5
    assert config.vat_percentage == DEFAULT_PRICING_CONFIG.vat_percentage


def test_unparseable_and_out_of_range_values_fall_back(caplog):
    env_values = {
        "PRICING_TRAVEL_FEE_PER_KM": "lots",
        "PRICING_VAT_PERCENTAGE": "1.5",
        "PRICING_STUMP_REMOVAL_FEE": "-10",
        "PRICING_WASTE_REMOVAL_FEE": "",
    }

    config = load_pricing_config(env_values)

    assert config == DEFAULT_PRICING_CONFIG
    assert "vat_percentage" in caplog.text
    assert "stump_removal_fee" in caplog.text


def test_json_overrides_apply_before_field_overrides():
    env_values = {
        "PRICING_OVERRIDES": (
            '{"vat_percentage": 0.16, "travel_fee_per_km": 18, "not_a_field": 3, "cleaning_basic": "x"}'
        ),
        "PRICING_TRAVEL_FEE_PER_KM": "25",
    }

    config = load_pricing_config(env_values)

    assert config.vat_percentage == 0.16
    assert config.travel_fee_per_km == 25.0
    assert config.cleaning_basic == DEFAULT_PRICING_CONFIG.cleaning_basic


@pytest.mark.parametrize("raw", ["not-json", "[1, 2]"])
def test_invalid_json_overrides_are_ignored(raw):
    assert load_pricing_config({"PRICING_OVERRIDES": raw}) == DEFAULT_PRICING_CONFIG


@pytest.mark.parametrize(
    "overrides",
    [
        {"vat_percentage": 1.0},
        {"platform_fee_percentage": -0.1},
        {"minimum_job_value": -1.0},
        {"travel_fee_per_km": float("nan")},
    ],
)
def test_invalid_config_is_rejected(overrides):
    with pytest.raises(ValueError):
        PricingConfig(**overrides)


def test_config_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_PRICING_CONFIG.vat_percentage = 0.2


def test_display_names():
    assert DEFAULT_PRICING_CONFIG.display_name("dstv_installation") == "DSTV Installation"
    assert DEFAULT_PRICING_CONFIG.display_name("grass_cutting") == "Grass Cutting"
    assert DEFAULT_PRICING_CONFIG.display_name("dog_walking") == "Service"


@pytest.mark.parametrize(
    "service_type, area, hours",
    [
        ("grass_cutting", None, 2.0),
        ("grass_cutting", 150, 2.0),
        ("grass_cutting", 300, 3.0),
        ("grass_cutting", 600, 4.0),
        ("grass_cutting", 601, 6.0),
        ("yard_clearing", None, 4.0),
        ("yard_clearing", 100, 3.0),
        ("yard_clearing", 300, 5.0),
        ("yard_clearing", 301, 8.0),
        ("painting", 60, 3.0),
        ("painting", None, 4.0),
        ("tree_felling", None, 6.0),
        ("errands", None, 1.0),
        ("moving_help", 500, 4.0),
        ("gardening", 500, 2.0),
        ("dog_walking", None, 2.0),
    ],
)
def test_estimated_hours(service_type, area, hours):
    assert DEFAULT_PRICING_CONFIG.estimated_hours(service_type, area) == pytest.approx(hours)
