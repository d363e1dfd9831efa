"""
Services Module

Business logic behind the API routers:
- Credit ledger: daily allowance, grants and atomic debits
- Rooms: co-working rooms, presence and chat
- Invoices and accounting transactions
- Identity: password and OAuth sign-in
- Generative content and document intelligence (OpenAI-compatible backend)
"""

from .credits import (
    Feature,
    FEATURE_COSTS,
    CreditState,
    DebitResult,
    get_credit_cost,
    reset_if_stale,
    get_balance,
    debit,
    require_credits,
)
from .content_generator import content_generator
from .document_intelligence import document_intelligence

__all__ = [
    # Credit ledger
    "Feature",
    "FEATURE_COSTS",
    "CreditState",
    "DebitResult",
    "get_credit_cost",
    "reset_if_stale",
    "get_balance",
    "debit",
    "require_credits",
    # Generative backends
    "content_generator",
    "document_intelligence",
]
