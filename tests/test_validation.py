import dataclasses
from decimal import Decimal

import pytest

from bitrade.validation import (
    AddOrderRequest,
    CreateMarketRequest,
    ValidationError,
    validate_add_order_request,
    validate_create_market_request,
    validate_positive_decimal,
)


def order_request(**changes):
    base = AddOrderRequest(
        market_id="BTC-USD",
        order_type="LIMIT",
        side="BUY",
        user_id="1",
        price="50000",
        base_amount="1",
        quote_amount="50000",
        maker_fee="0.001",
        taker_fee="0.002",
    )
    return dataclasses.replace(base, **changes)


def market_request(**changes):
    base = CreateMarketRequest(
        market_id="BTC-USD",
        base_asset="BTC",
        quote_asset="USD",
        default_maker_fee="0.001",
        default_taker_fee="0.002",
    )
    return dataclasses.replace(base, **changes)


def test_positive_decimal_is_parsed():
    assert validate_positive_decimal("0.001", "fee") == Decimal("0.001")


@pytest.mark.parametrize("value", ["0", "-1", "abc", "", "NaN", "Infinity"])
def test_positive_decimal_rejects(value):
    with pytest.raises(ValidationError, match="fee"):
        validate_positive_decimal(value, "fee")


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        validate_positive_decimal("-5", "price")


def test_valid_order_passes_then_empty_user_fails():
    assert validate_add_order_request(order_request(quote_amount="")) is None
    with pytest.raises(ValidationError, match="User ID cannot be empty"):
        validate_add_order_request(order_request(user_id=""))


def test_order_needs_market_id():
    with pytest.raises(ValidationError, match="Market ID cannot be empty"):
        validate_add_order_request(order_request(market_id=""))


@pytest.mark.parametrize("field", ["price", "base_amount", "quote_amount"])
def test_order_amounts_must_be_positive(field):
    with pytest.raises(ValidationError, match=field):
        validate_add_order_request(order_request(**{field: "0"}))


def test_quote_amount_must_match_price_times_base():
    with pytest.raises(ValidationError, match="does not match"):
        validate_add_order_request(order_request(quote_amount="49999"))


def test_quote_amount_within_tolerance_is_accepted():
    req = order_request(quote_amount="50000.00000001")
    assert validate_add_order_request(req) is None
    with pytest.raises(ValidationError, match="does not match"):
        validate_add_order_request(order_request(quote_amount="50000.001"))


@pytest.mark.parametrize(
    "changes, message",
    [
        ({"market_id": ""}, "Market ID cannot be empty"),
        ({"base_asset": ""}, "Base asset cannot be empty"),
        ({"quote_asset": ""}, "Quote asset cannot be empty"),
        ({"default_maker_fee": "0"}, "default_maker_fee"),
        ({"default_taker_fee": "x"}, "default_taker_fee"),
    ],
)
def test_create_market_errors(changes, message):
    with pytest.raises(ValidationError, match=message):
        validate_create_market_request(market_request(**changes))


def test_create_market_valid_then_invalid():
    assert validate_create_market_request(market_request()) is None
    with pytest.raises(ValidationError):
        validate_create_market_request(market_request(default_maker_fee="-0.1"))