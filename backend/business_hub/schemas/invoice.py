"""
Pydantic schemas for invoice and transaction endpoints.
Field names follow the frontend's camelCase invoice shape, which is also the
PDF renderer's input contract.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

class LineItem(BaseModel):
    """One invoice row"""
    description: str
    quantity: float
    price: float

class InvoiceIn(BaseModel):
    """
    Request model for creating or updating an invoice.
    Totals are never accepted from the client; they are computed server-side.
    Business rules (required names, positive quantities, payment URL) are
    checked by the invoice service so they surface as VALIDATION_ERROR.
    """
    invoiceNumber: str
    businessName: str
    businessAddress: str = ""
    businessContact: Optional[str] = None
    clientName: str
    clientAddress: Optional[str] = None
    clientContact: Optional[str] = None
    invoiceDate: str  # ISO-8601
    dueDate: str  # ISO-8601
    items: List[LineItem] = Field(default_factory=list)
    tax: float = 0
    taxType: Literal["percentage", "amount"] = "percentage"
    notes: Optional[str] = None
    currency: Literal["USD", "INR"] = "USD"
    paymentMethod: Literal["link", "none"] = "none"
    linkPayUrl: Optional[str] = None

class TransactionIn(BaseModel):
    """Request model for recording an income or expense."""
    type: Literal["income", "expense"]
    amount: float
    currency: Literal["USD", "INR"] = "USD"
    category: str
    description: Optional[str] = None
    date: str  # ISO-8601
    status: Literal["paid", "pending"] = "paid"

class FinancialAdviceIn(BaseModel):
    question: Optional[str] = None  # Optional user question for the analyst
