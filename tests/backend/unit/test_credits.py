"""
Unit tests for services.credits module.
Tests the daily reset rule, the cost table, and debits against the database.
"""
import asyncio
import datetime as dt

import pytest

from business_hub.core.errors import InsufficientCredits, UnknownFeature
from business_hub.models.credit_grant import CreditGrant
from business_hub.models.user import User
from business_hub.services import credits
from business_hub.services.credits import (
    CreditState,
    DebitResult,
    Feature,
    FEATURE_COSTS,
    get_credit_cost,
    reset_if_stale,
)

DAY = dt.date(2026, 3, 14)


class TestResetRule:
    """Tests for the pure daily reset function."""

    def test_same_day_is_unchanged(self):
        state = CreditState(credits=7, last_reset=DAY)
        assert reset_if_stale(state, DAY, allowance=50) is state

    def test_previous_day_resets_to_allowance(self):
        state = CreditState(credits=7, last_reset=DAY - dt.timedelta(days=1))
        assert reset_if_stale(state, DAY, allowance=50) == CreditState(50, DAY)

    def test_never_reset_gets_allowance(self):
        state = CreditState(credits=0, last_reset=None)
        assert reset_if_stale(state, DAY, allowance=50) == CreditState(50, DAY)

    def test_reset_replaces_balance_above_allowance(self):
        """Unused credits do not carry over, even above the allowance."""
        state = CreditState(credits=80, last_reset=DAY - dt.timedelta(days=3))
        assert reset_if_stale(state, DAY, allowance=50).credits == 50

    def test_reset_is_idempotent(self):
        state = CreditState(credits=3, last_reset=None)
        once = reset_if_stale(state, DAY, allowance=50)
        assert reset_if_stale(once, DAY, allowance=50) == once


class TestCostTable:
    """Tests for feature cost lookup."""

    def test_known_costs(self):
        assert get_credit_cost(Feature.CO_WORKING_ROOM) == 2
        assert get_credit_cost("invoice-generator") == 2
        assert get_credit_cost("document-intelligence") == 5
        assert get_credit_cost("startup-generator") == 5
        assert get_credit_cost("email-generator") == 5
        assert get_credit_cost("accounting-ai") == 5

    def test_every_feature_has_positive_cost(self):
        assert set(FEATURE_COSTS) == set(Feature)
        assert all(cost > 0 for cost in FEATURE_COSTS.values())

    def test_unknown_feature_is_rejected(self):
        with pytest.raises(UnknownFeature) as exc:
            get_credit_cost("time-travel")
        assert exc.value.status_code == 400
        assert exc.value.to_dict()["feature"] == "time-travel"

    def test_debit_result_wire_shape(self):
        assert DebitResult(True, 5, 1).to_dict() == {"approved": True, "cost": 5, "newBalance": 1}
        assert DebitResult(False, 5).to_dict() == {"approved": False, "cost": 5}


@pytest.mark.usefixtures("db")
class TestLedger:
    """Tests for balance resolution and debits against the store."""

    @pytest.mark.asyncio
    async def test_debit_then_reject(self, create_user):
        """Balance 6, cost 5: first debit approved leaving 1, second rejected leaving 1."""
        user, _ = await create_user(credits=6)

        first = await credits.debit(user.id, Feature.EMAIL_GENERATOR)
        assert first == DebitResult(approved=True, cost=5, new_balance=1)

        second = await credits.debit(user.id, Feature.EMAIL_GENERATOR)
        assert second.approved is False
        assert second.cost == 5

        assert await credits.get_balance(user.id) == 1

    @pytest.mark.asyncio
    async def test_exact_balance_is_enough(self, create_user):
        user, _ = await create_user(credits=2)
        result = await credits.debit(user.id, "co-working-room")
        assert result.approved is True
        assert result.new_balance == 0

    @pytest.mark.asyncio
    async def test_unknown_feature_leaves_balance(self, create_user):
        user, _ = await create_user(credits=10)
        with pytest.raises(UnknownFeature):
            await credits.debit(user.id, "time-travel")
        assert await credits.get_balance(user.id) == 10

    @pytest.mark.asyncio
    async def test_stale_balance_resets_on_read(self, create_user):
        user, _ = await create_user(credits=1, last_reset=DAY - dt.timedelta(days=1))

        assert await credits.get_balance(user.id, on=DAY) == credits.DAILY_ALLOWANCE

        stored = await User.get(id=user.id)
        assert stored.credits_last_reset == DAY

    @pytest.mark.asyncio
    async def test_reset_happens_once_per_day(self, create_user):
        user, _ = await create_user(credits=0, last_reset=None)

        await credits.get_balance(user.id, on=DAY)
        await credits.debit(user.id, Feature.STARTUP_GENERATOR, on=DAY)
        assert await credits.get_balance(user.id, on=DAY) == credits.DAILY_ALLOWANCE - 5

        # Next day: full allowance again
        assert await credits.get_balance(user.id, on=DAY + dt.timedelta(days=1)) == credits.DAILY_ALLOWANCE

    @pytest.mark.asyncio
    async def test_grant_raises_balance_to_floor(self, create_user):
        user, _ = await create_user(credits=3, email="founder@example.com")
        await CreditGrant.create(email="founder@example.com", balance=500, reason="launch partner")

        assert await credits.get_balance(user.id) == 500

        result = await credits.debit(user.id, Feature.ACCOUNTING_AI)
        assert result.new_balance == 495
        # The next read tops the account back up
        assert await credits.get_balance(user.id) == 500

    @pytest.mark.asyncio
    async def test_grant_never_lowers_balance(self, create_user):
        user, _ = await create_user(credits=40, email="small@example.com")
        await CreditGrant.create(email="small@example.com", balance=10)
        assert await credits.get_balance(user.id) == 40

    @pytest.mark.asyncio
    async def test_concurrent_debits_never_overdraw(self, create_user):
        """23 credits, ten 5-credit debits at once: exactly four succeed."""
        user, _ = await create_user(credits=23)

        results = await asyncio.gather(*[
            credits.debit(user.id, Feature.DOCUMENT_INTELLIGENCE) for _ in range(10)
        ])

        assert sum(r.approved for r in results) == 4
        assert await credits.get_balance(user.id) == 3

    @pytest.mark.asyncio
    async def test_require_credits_raises_with_cost(self, create_user):
        user, _ = await create_user(credits=1)
        with pytest.raises(InsufficientCredits) as exc:
            await credits.require_credits(user, Feature.INVOICE_GENERATOR)
        assert exc.value.cost == 2
        assert exc.value.balance == 1
        assert exc.value.status_code == 402

    @pytest.mark.asyncio
    async def test_seed_grants_parses_and_upserts(self):
        count = await credits.seed_grants("A@Example.com:100, bad-entry ,b@example.com:80")
        assert count == 2
        assert (await CreditGrant.get(email="a@example.com")).balance == 100

        await credits.seed_grants("a@example.com:120")
        assert (await CreditGrant.get(email="a@example.com")).balance == 120
        assert await CreditGrant.all().count() == 2
