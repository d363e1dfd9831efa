# business_hub/api/v1/routers/admin.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from business_hub.api.v1.deps import require_admin, get_current_user
from business_hub.models.credit_grant import CreditGrant
from business_hub.models.user import User
from business_hub.schemas.admin import CreditGrantIn, CreditGrantListOut, CreditGrantOut

router = APIRouter(prefix="/admin", tags=["admin"])


def _grant_to_dict(g: CreditGrant) -> dict:
    """
    Convert a CreditGrant model to the admin response shape.
    """
    return {
        "id": g.id,
        "email": g.email,
        "balance": g.balance,
        "reason": g.reason,
        "createdBy": str(g.created_by_id) if g.created_by_id else None,
        "createdAt": g.created_at.isoformat() if g.created_at else None,
    }


@router.get(
    "/credit-grants",
    response_model=CreditGrantListOut,
    dependencies=[Depends(require_admin)],
)
async def list_credit_grants(
    q: Optional[str] = Query(None, description="Search by email (fuzzy)"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    """
    List credit grants (admin only).

    Supports fuzzy search on the email and pagination.

    Returns:
        CreditGrantListOut: items and total count
    """
    qs = CreditGrant.all()
    if q:
        qs = qs.filter(email__icontains=q.strip().lower())

    total = await qs.count()
    rows = await qs.order_by("email").offset(offset).limit(limit)
    return {"items": [_grant_to_dict(g) for g in rows], "total": total}


@router.post(
    "/credit-grants",
    response_model=CreditGrantOut,
    dependencies=[Depends(require_admin)],
)
async def upsert_credit_grant(
    body: CreditGrantIn,
    current_admin: User = Depends(get_current_user),
):
    """
    Issue a credit grant, or replace the existing grant for the same email.

    The grant takes effect on the account's next balance read: whenever its
    credits sit below `balance` they are raised to it.
    """
    email = body.email.strip().lower()
    if not email:
        raise HTTPException(
            status_code=400,
            detail={"code": "EMAIL_REQUIRED", "message": "Email is required"},
        )

    grant, _ = await CreditGrant.update_or_create(
        email=email,
        defaults={"balance": body.balance, "reason": body.reason, "created_by_id": current_admin.id},
    )
    return _grant_to_dict(grant)


@router.delete(
    "/credit-grants/{grant_id}",
    dependencies=[Depends(require_admin)],
)
async def delete_credit_grant(grant_id: int):
    """
    Revoke a credit grant (admin only). Balances already raised are left alone.
    """
    deleted = await CreditGrant.filter(id=grant_id).delete()
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="GRANT_NOT_FOUND")
    return {"success": True, "data": {"ok": True}}
