"""HTML rendering of an invoice for its public link."""

from jinja2 import Environment, select_autoescape

_env = Environment(autoescape=select_autoescape(default=True, default_for_string=True))

INVOICE_TEMPLATE = _env.from_string(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Invoice {{ invoice.invoice_number }}</title>
  <style>
    body { font-family: Helvetica, Arial, sans-serif; color: #222; margin: 40px; }
    table { width: 100%; border-collapse: collapse; margin-top: 24px; }
    th, td { padding: 8px; border-bottom: 1px solid #ddd; text-align: left; }
    td.num, th.num { text-align: right; }
    .parties { display: flex; justify-content: space-between; margin-top: 24px; }
    .address { white-space: pre-line; }
    .status { text-transform: uppercase; font-weight: bold; }
  </style>
</head>
<body>
  <h1>{{ title }}</h1>
  <p>Invoice number: <strong>{{ invoice.invoice_number }}</strong><br>
     Issued: {{ invoice.issued_at.strftime("%d %b %Y") if invoice.issued_at else "" }}<br>
     Status: <span class="status">{{ invoice.payment_status }}</span></p>

  <div class="parties">
    <div>
      <h3>From</h3>
      <strong>{{ invoice.issuer_name }}</strong>
      <div class="address">{{ invoice.issuer_address or "" }}</div>
      {% if invoice.issuer_email %}<div>{{ invoice.issuer_email }}</div>{% endif %}
      {% if invoice.issuer_phone %}<div>{{ invoice.issuer_phone }}</div>{% endif %}
    </div>
    <div>
      <h3>Bill to</h3>
      <strong>{{ invoice.addressee_name }}</strong>
      <div class="address">{{ invoice.addressee_address or "" }}</div>
      {% if invoice.addressee_email %}<div>{{ invoice.addressee_email }}</div>{% endif %}
      {% if invoice.addressee_phone %}<div>{{ invoice.addressee_phone }}</div>{% endif %}
    </div>
  </div>

  <table>
    <thead>
      <tr><th>Description</th><th class="num">Qty</th><th class="num">Unit price</th><th class="num">Total</th></tr>
    </thead>
    <tbody>
    {% for item in invoice.line_items %}
      <tr>
        <td>{{ item.description }}</td>
        <td class="num">{{ item.quantity | int }}</td>
        <td class="num">{{ "%.2f" | format(item.unit_price) }}</td>
        <td class="num">{{ "%.2f" | format(item.total) }}</td>
      </tr>
    {% endfor %}
    </tbody>
  </table>

  <table>
    <tr><td>Subtotal</td><td class="num">{{ invoice.currency }} {{ "%.2f" | format(invoice.subtotal) }}</td></tr>
    {% if invoice.shipping_amount %}
    <tr><td>Shipping</td><td class="num">{{ invoice.currency }} {{ "%.2f" | format(invoice.shipping_amount) }}</td></tr>
    {% endif %}
    {% if invoice.packing_amount %}
    <tr><td>Packing</td><td class="num">{{ invoice.currency }} {{ "%.2f" | format(invoice.packing_amount) }}</td></tr>
    {% endif %}
    <tr>
      <td>VAT ({{ invoice.vat_percent }}%)</td>
      <td class="num">{{ invoice.currency }} {{ "%.2f" | format(invoice.vat_amount) }}</td>
    </tr>
    <tr><th>Total</th><th class="num">{{ invoice.currency }} {{ "%.2f" | format(invoice.total) }}</th></tr>
  </table>

  {% if invoice.comments %}<h3>Comments</h3><p>{{ invoice.comments }}</p>{% endif %}
  {% if invoice.terms_conditions %}<h3>Terms &amp; Conditions</h3><p>{{ invoice.terms_conditions }}</p>{% endif %}
</body>
</html>
"""
)


def render_invoice(invoice):
    title = "Vendor Invoice" if invoice.invoice_type == "admin" else "Tax Invoice"
    return INVOICE_TEMPLATE.render(invoice=invoice, title=title)
