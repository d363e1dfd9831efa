from fastapi import APIRouter, Depends
from business_hub.api.v1.deps import get_current_user
from business_hub.models.user import User
from business_hub.services import credits

router = APIRouter(prefix="/credits", tags=["credits"])

def _cost_table() -> dict:
    return {feature.value: cost for feature, cost in credits.FEATURE_COSTS.items()}

@router.get("")
async def get_balance(user: User = Depends(get_current_user)):
    """
    Current balance of the authenticated user.

    Resolving the balance applies the daily reset and any credit grant first.
    """
    balance = await credits.get_balance(user.id)
    return {"success": True, "data": {
        "balance": balance,
        "dailyAllowance": credits.DAILY_ALLOWANCE,
        "costs": _cost_table(),
    }}

@router.get("/costs")
async def get_costs():
    return {"success": True, "data": _cost_table()}
