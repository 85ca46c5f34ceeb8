"""
Tests for adalloc.validators module.
"""
import logging

import pytest
from datetime import date

from adalloc.exceptions import ValidationError
from adalloc.models import CampaignStatus, Currency
from adalloc.validators import (
    validate_allocations,
    validate_clicks_impressions,
    validate_count,
    validate_date_order,
    validate_enum,
    validate_name,
    validate_non_negative,
    validate_optional_date,
)


class TestValidateNonNegative:
    """Tests for validate_non_negative function."""

    def test_valid_values(self):
        assert validate_non_negative(0, "spend") == 0.0
        assert validate_non_negative(1500, "spend") == 1500.0
        assert validate_non_negative(2.5, "roas") == 2.5

    def test_negative(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_non_negative(-1, "spend")
        assert "negative" in str(exc_info.value).lower()
        assert exc_info.value.field == "spend"

    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_not_finite(self, value):
        with pytest.raises(ValidationError):
            validate_non_negative(value, "spend")

    @pytest.mark.parametrize("value", ["100", None, True])
    def test_not_a_number(self, value):
        with pytest.raises(ValidationError):
            validate_non_negative(value, "spend")


class TestValidateCount:
    """Tests for validate_count function."""

    def test_valid(self):
        assert validate_count(12500, "clicks") == 12500

    def test_whole_float_accepted(self):
        assert validate_count(10.0, "clicks") == 10

    def test_fractional_rejected(self):
        with pytest.raises(ValidationError):
            validate_count(1.5, "clicks")

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            validate_count(-1, "impressions")


class TestValidateClicksImpressions:
    """clicks > impressions is tolerated."""

    def test_warns_only(self, caplog):
        with caplog.at_level(logging.WARNING):
            validate_clicks_impressions(200, 100)
        assert "Clicks exceed impressions" in caplog.text


class TestValidateName:
    """Tests for validate_name function."""

    def test_strips(self):
        assert validate_name("  Google Ads ") == "Google Ads"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_name(value)
        assert "required" in str(exc_info.value).lower()

    def test_too_long(self):
        with pytest.raises(ValidationError):
            validate_name("x" * 300)


class TestValidateDates:
    """Tests for date validators."""

    def test_optional_date(self):
        assert validate_optional_date(None) is None
        assert validate_optional_date("") is None
        assert validate_optional_date("2024-06-01") == date(2024, 6, 1)
        assert validate_optional_date(date(2024, 6, 1)) == date(2024, 6, 1)

    def test_invalid_date(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_optional_date("2024-02-30", "deadline")
        assert "Invalid date format" in str(exc_info.value)

    def test_date_order(self):
        validate_date_order(date(2024, 1, 1), date(2024, 1, 1))
        validate_date_order(date(2024, 1, 1), None)
        with pytest.raises(ValidationError):
            validate_date_order(date(2024, 2, 1), date(2024, 1, 1))


class TestValidateEnum:
    """Tests for validate_enum function."""

    def test_parses_value(self):
        assert validate_enum("paused", CampaignStatus, "status") is CampaignStatus.PAUSED
        assert validate_enum(Currency.EUR, Currency, "currency") is Currency.EUR

    def test_unknown_value(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_enum("JPY", Currency, "currency")
        assert "USD" in str(exc_info.value)


class TestValidateAllocations:
    """Tests for validate_allocations function."""

    def test_valid(self):
        assert validate_allocations({"google": 100, "meta": 0}) == {"google": 100.0, "meta": 0.0}

    def test_negative_entry(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_allocations({"google": -5})
        assert exc_info.value.field == "allocations.google"

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError):
            validate_allocations([("google", 100)])
