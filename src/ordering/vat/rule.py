"""VAT rules — the rates applied between a vendor region and a customer region.

Two rates apply to every sale: the VAT the vendor charges the platform, and
the VAT the platform charges the customer. Rules are keyed by the region
pair; when no rule matches, both rates default to 5%.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from shared.regions import REST_OF_WORLD, UAE, classify_region

logger = structlog.get_logger(__name__)

DEFAULT_VAT_PERCENT = 5.0
_REGIONS = (UAE, REST_OF_WORLD)


@ordering.aggregate
class VatRule:
    scenario = String(required=True, max_length=100)
    source_region = String(required=True, max_length=3)
    destination_region = String(required=True, max_length=3)
    vendor_to_admin_vat_percent = Float(default=0.0, min_value=0.0, max_value=100.0)
    admin_to_customer_vat_percent = Float(default=0.0, min_value=0.0, max_value=100.0)

    def as_dict(self):
        return {
            "id": str(self.id),
            "scenario": self.scenario,
            "source_region": self.source_region,
            "destination_region": self.destination_region,
            "vendor_to_admin_vat_percent": self.vendor_to_admin_vat_percent,
            "admin_to_customer_vat_percent": self.admin_to_customer_vat_percent,
        }


@ordering.command(part_of=VatRule)
class DefineVatRule:
    """Create or replace the rule for a source/destination region pair."""

    scenario = String(required=True, max_length=100)
    source_region = String(required=True, max_length=3)
    destination_region = String(required=True, max_length=3)
    vendor_to_admin_vat_percent = Float(default=0.0)
    admin_to_customer_vat_percent = Float(default=0.0)


def _rule_for(source_region, destination_region):
    rules = (
        current_domain.repository_for(VatRule)
        ._dao.query.filter(source_region=source_region, destination_region=destination_region)
        .all()
        .items
    )
    return rules[0] if rules else None


def list_vat_rules():
    rules = current_domain.repository_for(VatRule)._dao.query.all().items
    return sorted(rules, key=lambda r: (r.source_region, r.destination_region))


def resolve_vat(source_country, destination_country):
    """The rates that apply when a vendor in `source_country` sells to `destination_country`.

    Returns:
        dict with `vendor_to_admin_vat`, `admin_to_customer_vat` and `scenario`.
    """
    source_region = classify_region(source_country)
    destination_region = classify_region(destination_country)

    rule = _rule_for(source_region, destination_region)
    if rule:
        return {
            "vendor_to_admin_vat": rule.vendor_to_admin_vat_percent or 0.0,
            "admin_to_customer_vat": rule.admin_to_customer_vat_percent or 0.0,
            "scenario": rule.scenario,
        }

    logger.warning(
        "No VAT rule for region pair, using default",
        source_region=source_region,
        destination_region=destination_region,
        default_percent=DEFAULT_VAT_PERCENT,
    )
    return {
        "vendor_to_admin_vat": DEFAULT_VAT_PERCENT,
        "admin_to_customer_vat": DEFAULT_VAT_PERCENT,
        "scenario": "Default",
    }


@ordering.command_handler(part_of=VatRule)
class VatRuleHandler:
    @handle(DefineVatRule)
    def define_vat_rule(self, command):
        source_region = command.source_region.upper()
        destination_region = command.destination_region.upper()
        errors = {}
        if source_region not in _REGIONS:
            errors["source_region"] = [f"Must be one of {', '.join(_REGIONS)}"]
        if destination_region not in _REGIONS:
            errors["destination_region"] = [f"Must be one of {', '.join(_REGIONS)}"]
        if errors:
            raise ValidationError(errors)

        repo = current_domain.repository_for(VatRule)
        rule = _rule_for(source_region, destination_region)
        if rule is None:
            rule = VatRule(
                scenario=command.scenario,
                source_region=source_region,
                destination_region=destination_region,
            )
        rule.scenario = command.scenario
        rule.vendor_to_admin_vat_percent = command.vendor_to_admin_vat_percent
        rule.admin_to_customer_vat_percent = command.admin_to_customer_vat_percent
        repo.add(rule)

        logger.info(
            "VAT rule defined",
            scenario=rule.scenario,
            source_region=source_region,
            destination_region=destination_region,
        )
        return str(rule.id)
