from __future__ import annotations

from whitecat.domain.entities.server_config import ServerConfig
from whitecat.domain.exceptions import (
    InsufficientBalanceError,
    InvalidStateError,
    ValidationError,
)


MIN_MONTHS = 1
MAX_MONTHS = 24
SERVER_NAME_MIN_LENGTH = 3
SERVER_NAME_MAX_LENGTH = 50


def validate_months(months: int) -> int:
    if isinstance(months, bool) or not isinstance(months, int):
        raise ValidationError.for_field("months", "months must be an integer")
    if months < MIN_MONTHS or months > MAX_MONTHS:
        raise ValidationError.for_field(
            "months",
            f"months must be between {MIN_MONTHS} and {MAX_MONTHS}",
        )
    return months


def validate_server_name(server_name: str) -> str:
    name = (server_name or "").strip()
    if len(name) < SERVER_NAME_MIN_LENGTH or len(name) > SERVER_NAME_MAX_LENGTH:
        raise ValidationError.for_field(
            "server_name",
            f"server_name must be between {SERVER_NAME_MIN_LENGTH} and "
            f"{SERVER_NAME_MAX_LENGTH} characters",
        )
    return name


def validate_deposit_amount(amount: int) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError.for_field("amount", "Amount must be an integer")
    if amount <= 0:
        raise ValidationError.for_field("amount", "Amount must be greater than 0")
    return amount


def ensure_purchasable(config: ServerConfig) -> None:
    if not config.is_active:
        raise InvalidStateError("This server configuration is not available")


def total_price(config: ServerConfig, months: int) -> int:
    return config.price_monthly * months


def ensure_affordable(*, balance: int, required: int) -> None:
    if balance < required:
        raise InsufficientBalanceError(required=required, current=balance)
