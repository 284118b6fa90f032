"""CurrencyRate aggregate — how much of a currency buys one AED.

AED is the base: its rate is always 1. Converting between two currencies
goes through AED.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from marketplace.domain import marketplace

BASE_CURRENCY = "AED"


@marketplace.aggregate
class CurrencyRate:
    code = String(identifier=True, required=True, max_length=3)
    name = String(required=True, max_length=100)
    rate = Float(default=1.0)
    is_base = Boolean(default=False)
    is_active = Boolean(default=True)
    updated_at = DateTime()

    @classmethod
    def define(cls, code, name, rate=None):
        code = code.strip().upper()
        is_base = code == BASE_CURRENCY
        currency = cls(code=code, name=name, is_base=is_base, rate=1.0)
        currency.apply_rate(1.0 if is_base or rate is None else rate)
        return currency

    def apply_rate(self, rate, at=None):
        if self.is_base:
            rate = 1.0
        if rate is None or rate <= 0:
            raise ValidationError({"rate": ["Rate must be greater than zero"]})
        self.rate = float(rate)
        self.updated_at = at or datetime.now(UTC)

    def as_dict(self):
        return {
            "code": self.code,
            "name": self.name,
            "rate": self.rate,
            "is_base": bool(self.is_base),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
