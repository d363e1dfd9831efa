"""
Credit Ledger

Per-user daily credit budget gating the metered features:
1. Lazy daily reset, performed on the first balance access after midnight
2. Data-driven grants that keep selected accounts at a minimum balance
3. Atomic debit: a conditional UPDATE, so concurrent debits can never overdraw
"""
import datetime as dt
import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union
from zoneinfo import ZoneInfo

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from ..config import settings
from ..core.errors import AppError, InsufficientCredits, UnknownFeature
from ..models.credit_grant import CreditGrant
from ..models.user import User

logger = logging.getLogger("uvicorn.error")

DAILY_ALLOWANCE = settings.daily_credits


class Feature(str, enum.Enum):
    """Metered features, valued by their wire id"""
    CO_WORKING_ROOM = "co-working-room"
    DOCUMENT_INTELLIGENCE = "document-intelligence"
    STARTUP_GENERATOR = "startup-generator"
    INVOICE_GENERATOR = "invoice-generator"
    EMAIL_GENERATOR = "email-generator"
    ACCOUNTING_AI = "accounting-ai"


FEATURE_COSTS: Dict[Feature, int] = {
    Feature.CO_WORKING_ROOM: 2,
    Feature.DOCUMENT_INTELLIGENCE: 5,
    Feature.STARTUP_GENERATOR: 5,
    Feature.INVOICE_GENERATOR: 2,
    Feature.EMAIL_GENERATOR: 5,
    Feature.ACCOUNTING_AI: 5,
}


class AccountNotFound(AppError):
    code = "ACCOUNT_NOT_FOUND"
    status_code = 404
    message = "Account not found"


@dataclass(frozen=True)
class CreditState:
    """Balance plus the date of the last daily reset (None if never reset)"""
    credits: int
    last_reset: Optional[dt.date]


@dataclass
class DebitResult:
    approved: bool
    cost: int
    new_balance: Optional[int] = None

    def to_dict(self) -> dict:
        out = {"approved": self.approved, "cost": self.cost}
        if self.new_balance is not None:
            out["newBalance"] = self.new_balance
        return out


def get_credit_cost(feature: Union[Feature, str]) -> int:
    """
    Look up the fixed cost of a feature.

    Raises:
        UnknownFeature: for ids missing from the cost table
    """
    try:
        return FEATURE_COSTS[Feature(feature)]
    except ValueError:
        raise UnknownFeature(str(feature))


def today() -> dt.date:
    """Calendar date in the configured credits time zone"""
    return dt.datetime.now(ZoneInfo(settings.credits_timezone)).date()


def reset_if_stale(state: CreditState, on: dt.date, allowance: int = DAILY_ALLOWANCE) -> CreditState:
    """
    Apply the daily reset rule.

    A state last reset on a different calendar day (or never) is replaced by
    a full allowance stamped with `on`; a state reset today is returned as is.
    """
    if state.last_reset == on:
        return state
    return CreditState(credits=allowance, last_reset=on)


async def _read_credits(user_id, using_db=None) -> int:
    qs = User.filter(id=user_id)
    if using_db is not None:
        qs = qs.using_db(using_db)
    rows = await qs.values_list("credits", flat=True)
    if not rows:
        raise AccountNotFound()
    return rows[0]


async def _apply_grant(user: User) -> None:
    grant = await CreditGrant.get_or_none(email=(user.email or "").lower())
    if grant is None:
        return
    raised = await User.filter(id=user.id, credits__lt=grant.balance).update(credits=grant.balance)
    if raised:
        logger.info("[credits] grant applied user=%s balance=%s", user.id, grant.balance)


async def get_balance(user_id, on: Optional[dt.date] = None) -> int:
    """
    Resolve the current balance of an account.

    Applies the lazy daily reset and any credit grant before reading, so this
    "read" may write. The reset is stored with a compare-and-set on the reset
    date: when two requests race past midnight only one of them resets.
    """
    on = on or today()
    user = await User.get_or_none(id=user_id)
    if user is None:
        raise AccountNotFound()

    current = CreditState(user.credits, user.credits_last_reset)
    fresh = reset_if_stale(current, on)
    if fresh != current:
        qs = User.filter(id=user.id)
        if current.last_reset is None:
            qs = qs.filter(credits_last_reset__isnull=True)
        else:
            qs = qs.filter(credits_last_reset=current.last_reset)
        if await qs.update(credits=fresh.credits, credits_last_reset=fresh.last_reset):
            logger.info("[credits] daily reset user=%s credits=%s", user.id, fresh.credits)

    await _apply_grant(user)
    return await _read_credits(user.id)


async def debit(user_id, feature: Union[Feature, str], on: Optional[dt.date] = None) -> DebitResult:
    """
    Charge a feature's cost against an account.

    The deduction is a single `UPDATE ... SET credits = credits - cost WHERE
    credits >= cost`; zero affected rows means the balance was too low and
    nothing changed.
    """
    cost = get_credit_cost(feature)
    balance = await get_balance(user_id, on=on)
    if balance < cost:
        logger.warning("[credits] debit rejected user=%s feature=%s cost=%s balance=%s",
                       user_id, Feature(feature).value, cost, balance)
        return DebitResult(approved=False, cost=cost)

    async with in_transaction() as conn:
        updated = await (
            User.filter(id=user_id, credits__gte=cost)
            .using_db(conn)
            .update(credits=F("credits") - cost)
        )
        if not updated:
            logger.warning("[credits] debit lost race user=%s feature=%s", user_id, Feature(feature).value)
            return DebitResult(approved=False, cost=cost)
        new_balance = await _read_credits(user_id, using_db=conn)

    logger.info("[credits] debit user=%s feature=%s cost=%s balance=%s",
                user_id, Feature(feature).value, cost, new_balance)
    return DebitResult(approved=True, cost=cost, new_balance=new_balance)


async def require_credits(user: User, feature: Union[Feature, str]) -> DebitResult:
    """Debit or raise InsufficientCredits; used by every metered action."""
    result = await debit(user.id, feature)
    if not result.approved:
        raise InsufficientCredits(cost=result.cost, balance=await _read_credits(user.id))
    return result


async def seed_grants(entries: str) -> int:
    """
    Create grants from a "email:balance,email:balance" string.
    Existing grants for the same email are updated. Returns the number processed.
    """
    count = 0
    for entry in (entries or "").split(","):
        entry = entry.strip()
        if not entry:
            continue
        email, _, balance = entry.rpartition(":")
        if not email or not balance.strip().isdigit():
            logger.warning("[credits] ignoring malformed grant entry %r", entry)
            continue
        await CreditGrant.update_or_create(
            email=email.strip().lower(),
            defaults={"balance": int(balance), "reason": "seeded from configuration"},
        )
        count += 1
    return count
