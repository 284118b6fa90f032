"""Invoice lookups for customers, vendors, admins and public links."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from payments.invoice.invoice import Invoice, InvoiceType


def _query(**filters):
    repo = current_domain.repository_for(Invoice)
    query = repo._dao.query
    if filters:
        query = query.filter(**filters)
    return query.all().items


def _newest_first(invoices):
    return sorted(invoices, key=lambda i: i.issued_at, reverse=True)


def invoice_by_id(invoice_id):
    return current_domain.repository_for(Invoice).get(str(invoice_id))


def invoice_by_token(token):
    invoices = _query(access_token=token) if token else []
    if not invoices:
        raise ObjectNotFoundError("Invoice not found")
    return invoices[0]


def invoices_for_order(order_id):
    return sorted(_query(order_id=str(order_id)), key=lambda i: i.issued_at)


def invoices_for_group(order_group_id):
    return sorted(_query(order_group_id=str(order_group_id)), key=lambda i: i.issued_at)


def invoices_for_vendor(vendor_id):
    return _newest_first(_query(vendor_id=str(vendor_id), invoice_type=InvoiceType.ADMIN.value))


def invoices_for_customer(customer_id):
    return _newest_first(_query(customer_id=str(customer_id), invoice_type=InvoiceType.CUSTOMER.value))


def all_invoices(invoice_type=None):
    filters = {"invoice_type": invoice_type} if invoice_type else {}
    return _newest_first(_query(**filters))
