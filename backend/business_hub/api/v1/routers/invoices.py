from fastapi import APIRouter, Depends
from business_hub.api.v1.deps import get_current_user
from business_hub.models.user import User
from business_hub.schemas.invoice import InvoiceIn
from business_hub.services import invoices

router = APIRouter(prefix="/invoices", tags=["invoices"])

@router.get("")
async def list_invoices(user: User = Depends(get_current_user)):
    rows = await invoices.list_invoices(user)
    return {"success": True, "data": {"items": [invoices.invoice_to_dict(i) for i in rows]}}

@router.post("")
async def create_invoice(body: InvoiceIn, user: User = Depends(get_current_user)):
    """
    Create an invoice.

    Validates the form first, then charges the invoice-generator credit cost,
    stores the invoice with server-computed subtotal/total and records a
    pending income transaction for it.

    Error codes:
        - VALIDATION_ERROR (422): missing names, bad line items, missing payment URL
        - INSUFFICIENT_CREDITS (402)
    """
    inv, charge = await invoices.create_invoice(user, body)
    return {"success": True, "data": {"invoice": invoices.invoice_to_dict(inv), "credits": charge.to_dict()}}

@router.get("/{invoice_id}")
async def get_invoice(invoice_id: str, user: User = Depends(get_current_user)):
    inv = await invoices.get_invoice(user, invoice_id)
    return {"success": True, "data": invoices.invoice_to_dict(inv)}

@router.put("/{invoice_id}")
async def update_invoice(invoice_id: str, body: InvoiceIn, user: User = Depends(get_current_user)):
    """
    Replace an invoice's fields and recompute its totals. Editing is free.
    """
    inv = await invoices.update_invoice(user, invoice_id, body)
    return {"success": True, "data": invoices.invoice_to_dict(inv)}

@router.post("/{invoice_id}/paid")
async def mark_paid(invoice_id: str, user: User = Depends(get_current_user)):
    inv = await invoices.mark_invoice_paid(user, invoice_id)
    return {"success": True, "data": invoices.invoice_to_dict(inv)}

@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: str, user: User = Depends(get_current_user)):
    await invoices.delete_invoice(user, invoice_id)
    return {"success": True, "data": {"id": invoice_id, "deleted": True}}
