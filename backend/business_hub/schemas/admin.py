"""
Pydantic schemas for admin endpoints.
Defines request/response models for credit grant management.
"""
from pydantic import BaseModel, Field
from typing import Optional, List

class CreditGrantIn(BaseModel):
    """
    Request model for issuing (or replacing) a credit grant.
    """
    email: str  # Account email the grant applies to
    balance: int = Field(ge=1)  # Balance floor
    reason: Optional[str] = Field(default=None, max_length=255)  # Audit note

class CreditGrantOut(BaseModel):
    id: int
    email: str
    balance: int
    reason: Optional[str] = None
    createdBy: Optional[str] = None  # Issuing admin id, None when seeded from config
    createdAt: Optional[str] = None

class CreditGrantListOut(BaseModel):
    items: List[CreditGrantOut]
    total: int
