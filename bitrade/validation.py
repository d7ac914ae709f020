"""Checks applied to incoming requests before they reach a market."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

_QUOTE_TOLERANCE = Decimal("0.0000001")


class ValidationError(ValueError):
    """A request failed validation."""


@dataclass
class AddOrderRequest:
    market_id: str = ""
    order_type: str = ""
    side: str = ""
    user_id: str = ""
    price: str = ""
    base_amount: str = ""
    quote_amount: str = ""
    maker_fee: str = ""
    taker_fee: str = ""


@dataclass
class CreateMarketRequest:
    market_id: str = ""
    base_asset: str = ""
    quote_asset: str = ""
    default_maker_fee: str = ""
    default_taker_fee: str = ""


def validate_positive_decimal(value, field):
    """Parse ``value`` as a decimal and require it to be greater than zero."""
    try:
        number = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value!r} is not a decimal number") from None
    if not number.is_finite() or number <= 0:
        raise ValidationError(f"{field} must be a positive number, got {value}")
    return number


def validate_add_order_request(req: AddOrderRequest) -> None:
    """Raise ValidationError unless the order request is well formed."""
    price = validate_positive_decimal(req.price, "price")
    base_amount = validate_positive_decimal(req.base_amount, "base_amount")

    if req.quote_amount:
        quote_amount = validate_positive_decimal(req.quote_amount, "quote_amount")
        calculated_quote = price * base_amount
        if abs(calculated_quote - quote_amount) > _QUOTE_TOLERANCE:
            raise ValidationError(
                f"Quote amount ({quote_amount}) does not match "
                f"price * base_amount ({calculated_quote})"
            )

    if not req.market_id:
        raise ValidationError("Market ID cannot be empty")
    if not req.user_id:
        raise ValidationError("User ID cannot be empty")


def validate_create_market_request(req: CreateMarketRequest) -> None:
    """Raise ValidationError unless the market request is well formed."""
    if not req.market_id:
        raise ValidationError("Market ID cannot be empty")
    if not req.base_asset:
        raise ValidationError("Base asset cannot be empty")
    if not req.quote_asset:
        raise ValidationError("Quote asset cannot be empty")
    validate_positive_decimal(req.default_maker_fee, "default_maker_fee")
    validate_positive_decimal(req.default_taker_fee, "default_taker_fee")