"""Pydantic schemas for finance invoices.

Learn: Clients send line items (description, quantity, unit_price) and a
tax rate; amounts, subtotal, tax and total are computed server-side.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from bizdesk.db.models import InvoiceStatus


class LineItem(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    quantity: float = Field(..., ge=0)
    unit_price: float = Field(..., ge=0)


class LineItemRead(LineItem):
    amount: float


class InvoiceCreate(BaseModel):
    invoice_number: str = Field(..., min_length=1, max_length=50)
    customer_name: str = Field(..., min_length=1, max_length=200)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    items: list[LineItem] = Field(..., min_length=1)
    tax_rate: float = Field(default=0, ge=0, le=1)
    due_date: date
    notes: Optional[str] = None
    terms: Optional[str] = None


class InvoiceUpdate(BaseModel):
    """Partial update. Sending items recomputes the totals."""
    customer_name: Optional[str] = Field(None, min_length=1, max_length=200)
    status: Optional[InvoiceStatus] = None
    items: Optional[list[LineItem]] = Field(None, min_length=1)
    tax_rate: Optional[float] = Field(None, ge=0, le=1)
    due_date: Optional[date] = None
    notes: Optional[str] = None
    terms: Optional[str] = None


class InvoiceRead(BaseModel):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID]
    invoice_number: str
    customer_name: str
    status: str
    items: list[LineItemRead]
    subtotal: float
    tax_rate: float
    tax: float
    total: float
    due_date: date
    notes: Optional[str]
    terms: Optional[str]
    created_by: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}
