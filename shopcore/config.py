"""
CheckoutConfig — параметры оформления заказа.

Иммутабельная pydantic-модель: ставка налога и три тарифа доставки.
Конфигурация передаётся в checkout вызывающим кодом; ядро само ничего
не читает. parse_config / config_from_env возвращают Either вместо
pydantic.ValidationError.
"""

from decimal import Decimal
from typing import Any, Dict, Mapping, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import InvalidConfig
from .ftypes import Either

TAX_RATE_ENV = "SHOP_TAX_RATE"
SHIPPING_TIERS_ENV = "SHOP_SHIPPING_TIERS"


class CheckoutConfig(BaseModel):
    """Ставка налога в [0, 1] и тарифы доставки (1-5, 6-10, 11+ единиц)"""

    tax_rate: Decimal = Field(..., ge=0, le=1, description="Ставка налога, доля (0.14 = 14%)")
    shipping_tiers: Tuple[Decimal, Decimal, Decimal] = Field(
        ..., description="Тарифы доставки tier1, tier2, tier3"
    )

    model_config = {"frozen": True}

    @field_validator("shipping_tiers")
    @classmethod
    def validate_tiers_non_negative(cls, v: Tuple[Decimal, Decimal, Decimal]) -> Tuple[Decimal, Decimal, Decimal]:
        if any(t < 0 for t in v):
            raise ValueError(f"shipping tiers must be non-negative, got {v}")
        return v


DEFAULT_CONFIG = CheckoutConfig(
    tax_rate=Decimal("0.14"),
    shipping_tiers=(Decimal("10"), Decimal("20"), Decimal("30")),
)


def parse_config(data: Mapping[str, Any]) -> Either[InvalidConfig, CheckoutConfig]:
    try:
        return Either.right(CheckoutConfig.model_validate(dict(data)))
    except ValidationError as e:
        return Either.left(InvalidConfig(tuple(err["msg"] for err in e.errors())))


def config_from_env(environ: Mapping[str, str]) -> Either[InvalidConfig, CheckoutConfig]:
    """
    Конфигурация из переменных окружения:
      SHOP_TAX_RATE=0.14
      SHOP_SHIPPING_TIERS=10,20,30
    Отсутствующие значения берутся из DEFAULT_CONFIG.
    """
    data: Dict[str, Any] = {
        "tax_rate": environ.get(TAX_RATE_ENV, DEFAULT_CONFIG.tax_rate),
        "shipping_tiers": DEFAULT_CONFIG.shipping_tiers,
    }
    raw_tiers = environ.get(SHIPPING_TIERS_ENV)
    if raw_tiers is not None:
        data["shipping_tiers"] = tuple(part.strip() for part in raw_tiers.split(","))
    return parse_config(data)
