"""Sequential invoice numbers, one series per invoice type and year.

Admin invoices (vendor → platform) are numbered VND-2026-00001, customer
invoices (platform → customer) INV-2026-00001. The counter is an aggregate
of its own so numbers are never reused, even when invoices are deleted.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from payments.domain import payments

PREFIXES = {"admin": "VND", "customer": "INV"}


@payments.aggregate
class InvoiceCounter:
    series = String(identifier=True, max_length=10)  # e.g. "VND-2026"
    last_number = Integer(default=0)

    def next_number(self):
        self.last_number = (self.last_number or 0) + 1
        return f"{self.series}-{self.last_number:05d}"


def next_invoice_number(invoice_type, now=None):
    """Reserve the next number in the series for `invoice_type`."""
    year = (now or datetime.now(UTC)).year
    series = f"{PREFIXES[invoice_type]}-{year}"

    repo = current_domain.repository_for(InvoiceCounter)
    try:
        counter = repo.get(series)
    except ObjectNotFoundError:
        counter = InvoiceCounter(series=series)
    number = counter.next_number()
    repo.add(counter)
    return number
