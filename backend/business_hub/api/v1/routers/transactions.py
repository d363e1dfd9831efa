from fastapi import APIRouter, Depends
from business_hub.api.v1.deps import get_current_user
from business_hub.models.user import User
from business_hub.schemas.invoice import TransactionIn
from business_hub.services import invoices

router = APIRouter(prefix="/transactions", tags=["accounting"])

@router.get("")
async def list_transactions(user: User = Depends(get_current_user)):
    rows = await invoices.list_transactions(user)
    return {"success": True, "data": {"items": [invoices.transaction_to_dict(t) for t in rows]}}

@router.post("")
async def add_transaction(body: TransactionIn, user: User = Depends(get_current_user)):
    t = await invoices.add_transaction(user, body)
    return {"success": True, "data": invoices.transaction_to_dict(t)}

@router.delete("/{transaction_id}")
async def delete_transaction(transaction_id: str, user: User = Depends(get_current_user)):
    await invoices.delete_transaction(user, transaction_id)
    return {"success": True, "data": {"id": transaction_id, "deleted": True}}

