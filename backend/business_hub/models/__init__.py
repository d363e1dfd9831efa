# business_hub/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: account, identity and credit balance
- CreditGrant: data-driven balance floor for specific accounts
- Room / Participant / Message: co-working rooms, presence and chat log
- Invoice: invoices with computed totals
- Transaction: accounting income/expense records
"""
from .user import User
from .credit_grant import CreditGrant
from .room import Room, Participant, Message
from .invoice import Invoice
from .transaction import Transaction
