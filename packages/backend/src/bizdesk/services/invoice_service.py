"""Finance invoice service.

Learn: Totals are never trusted from the client. Each line's amount is
quantity × unit_price; subtotal is their sum; tax is subtotal × tax_rate.
The rate is stored with the invoice, so changing only the items (or only
the rate) reprices from the stored half. Money columns are
NUMERIC(12, 2), so values are rounded to cents here.
"""

from sqlalchemy.exc import IntegrityError

from bizdesk.auth.ownership import INVOICES
from bizdesk.db.models import Invoice
from bizdesk.services.scoped import ScopedResourceService


class DuplicateInvoiceNumber(ValueError):
    """Invoice numbers are unique per organization."""


def compute_totals(items: list[dict], tax_rate: float) -> dict:
    lines = [
        {**item, "amount": round(item["quantity"] * item["unit_price"], 2)}
        for item in items
    ]
    subtotal = round(sum(line["amount"] for line in lines), 2)
    tax = round(subtotal * tax_rate, 2)
    return {
        "items": lines,
        "subtotal": subtotal,
        "tax_rate": tax_rate,
        "tax": tax,
        "total": round(subtotal + tax, 2),
    }


class InvoiceService(ScopedResourceService[Invoice]):
    model = Invoice
    policy = INVOICES
    order_by = (Invoice.due_date.asc(),)
    label = "invoice"

    async def create(self, data):
        try:
            return await super().create(data)
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateInvoiceNumber(data["invoice_number"])

    def _prepare(self, fields):
        tax_rate = fields.pop("tax_rate", None)
        if "items" in fields:
            fields.update(compute_totals(fields["items"], tax_rate or 0))
        return fields

    async def update(self, resource_id, changes):
        changes = dict(changes)
        # Re-price from whichever half (items / tax rate) was not sent.
        if "items" in changes or "tax_rate" in changes:
            resource = await self.find(resource_id)
            if resource is not None:
                changes.setdefault(
                    "items",
                    [
                        {k: line[k] for k in ("description", "quantity", "unit_price")}
                        for line in resource.items
                    ],
                )
                changes.setdefault("tax_rate", resource.tax_rate)
        return await super().update(resource_id, changes)
