"""Currency lookups and conversion through AED."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Float, String
from protean.utils.globals import current_domain

from marketplace.currency.currency import CurrencyRate
from marketplace.domain import logger, marketplace


@marketplace.command(part_of=CurrencyRate)
class DefineCurrency:
    code = String(required=True, max_length=3)
    name = String(required=True, max_length=100)
    rate = Float()
    is_active = Boolean(default=True)


def currency(code):
    try:
        return current_domain.repository_for(CurrencyRate).get((code or "").strip().upper())
    except ObjectNotFoundError:
        raise ValidationError({"currency": [f"Currency not found: {code}"]}) from None


def all_rates():
    """Active currencies, base first, then by code."""
    currencies = [c for c in current_domain.repository_for(CurrencyRate)._dao.query.all().items if c.is_active]
    return sorted(currencies, key=lambda c: (not c.is_base, c.code))


def convert_amount(amount, from_code, to_code):
    """`amount` in `from_code` expressed in `to_code`, rounded to 2 decimals."""
    source, target = currency(from_code), currency(to_code)
    if not source.rate or not target.rate:
        raise ValidationError({"currency": ["Invalid exchange rates"]})
    return round(amount / source.rate * target.rate, 2)


@marketplace.command_handler(part_of=CurrencyRate)
class CurrencyHandler:
    @handle(DefineCurrency)
    def define_currency(self, command):
        repo = current_domain.repository_for(CurrencyRate)
        code = command.code.strip().upper()
        try:
            existing = repo.get(code)
        except ObjectNotFoundError:
            existing = None

        if existing is None:
            record = CurrencyRate.define(code, command.name, command.rate)
        else:
            record = existing
            record.name = command.name
            if command.rate is not None:
                record.apply_rate(command.rate)
        record.is_active = command.is_active
        repo.add(record)

        logger.info("Currency defined", code=code, rate=record.rate)
        return record.as_dict()
