"""Finance invoice routes.

Learn: Invoice numbers are unique per organization; a clash is a 409.
Totals in the response are always server-computed from the line items.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from bizdesk.auth.context import ActorContext
from bizdesk.auth.dependencies import get_current_actor, require_permission
from bizdesk.auth.permissions import Permission
from bizdesk.db.engine import get_db
from bizdesk.schemas.invoice import InvoiceCreate, InvoiceRead, InvoiceUpdate
from bizdesk.services.invoice_service import DuplicateInvoiceNumber, InvoiceService

router = APIRouter(prefix="/finance")


def _svc(
    db: AsyncSession = Depends(get_db),
    actor: ActorContext = Depends(get_current_actor),
) -> InvoiceService:
    return InvoiceService(db, actor)


@router.post(
    "/invoices",
    response_model=InvoiceRead,
    status_code=201,
    dependencies=[Depends(require_permission(Permission.FINANCE_CREATE))],
)
async def create_invoice(body: InvoiceCreate, svc: InvoiceService = Depends(_svc)):
    try:
        return await svc.create(body.model_dump())
    except DuplicateInvoiceNumber:
        raise HTTPException(status_code=409, detail="Invoice number already exists")


@router.get(
    "/invoices",
    response_model=list[InvoiceRead],
    dependencies=[Depends(require_permission(Permission.FINANCE_READ))],
)
async def list_invoices(svc: InvoiceService = Depends(_svc)):
    return await svc.list()


@router.get(
    "/invoices/{invoice_id}",
    response_model=InvoiceRead,
    dependencies=[Depends(require_permission(Permission.FINANCE_READ))],
)
async def get_invoice(invoice_id: uuid.UUID, svc: InvoiceService = Depends(_svc)):
    invoice = await svc.get(invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.put(
    "/invoices/{invoice_id}",
    response_model=InvoiceRead,
    dependencies=[Depends(require_permission(Permission.FINANCE_UPDATE))],
)
async def update_invoice(
    invoice_id: uuid.UUID,
    body: InvoiceUpdate,
    svc: InvoiceService = Depends(_svc),
):
    invoice = await svc.update(invoice_id, body.model_dump(exclude_none=True))
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.delete(
    "/invoices/{invoice_id}",
    dependencies=[Depends(require_permission(Permission.FINANCE_DELETE))],
)
async def delete_invoice(invoice_id: uuid.UUID, svc: InvoiceService = Depends(_svc)):
    if not await svc.delete(invoice_id):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return {"deleted": True}
