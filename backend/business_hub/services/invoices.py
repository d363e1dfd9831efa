"""
Invoices and accounting transactions.

Invoice totals follow one law:
    subtotal   = sum(quantity * price)
    tax_amount = tax                    if tax_type == "amount"
               = subtotal * tax / 100   if tax_type == "percentage"
    total      = subtotal + tax_amount
Amounts are Decimals, rounded to cents only on output.
"""
import logging
import math
import uuid
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

from ..core.errors import AppError, ValidationError
from ..models.invoice import Invoice
from ..models.transaction import Transaction
from ..models.user import User
from ..schemas.invoice import InvoiceIn, LineItem, TransactionIn
from .content_generator import FinancialAdvice, content_generator
from .credits import DebitResult, Feature, require_credits

logger = logging.getLogger("uvicorn.error")

CENT = Decimal("0.01")


class InvoiceNotFound(AppError):
    code = "INVOICE_NOT_FOUND"
    status_code = 404
    message = "Invoice not found"


class TransactionNotFound(AppError):
    code = "TRANSACTION_NOT_FOUND"
    status_code = 404
    message = "Transaction not found"


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def compute_totals(items: Iterable[LineItem], tax, tax_type: str) -> InvoiceTotals:
    subtotal = sum((_dec(i.quantity) * _dec(i.price) for i in items), Decimal("0"))
    tax = _dec(tax)
    tax_amount = tax if tax_type == "amount" else subtotal * tax / Decimal(100)
    total = subtotal + tax_amount
    return InvoiceTotals(
        subtotal=subtotal.quantize(CENT, rounding=ROUND_HALF_UP),
        tax_amount=tax_amount.quantize(CENT, rounding=ROUND_HALF_UP),
        total=total.quantize(CENT, rounding=ROUND_HALF_UP),
    )


def _finite(*values) -> bool:
    # NaN compares false both ways, so the range checks below cannot catch it
    return all(math.isfinite(v) for v in values)


def validate_invoice(data: InvoiceIn) -> None:
    """Local form checks; runs before anything touches the store."""
    if not data.businessName.strip() or not data.clientName.strip():
        raise ValidationError("Business Name and Client Name are required.")
    if not data.items:
        raise ValidationError("An invoice needs at least one line item.")
    if any(not _finite(i.quantity, i.price) or not i.description.strip() or i.quantity <= 0 or i.price < 0
           for i in data.items):
        raise ValidationError(
            "All line items must have a description, quantity greater than 0, and a non-negative price."
        )
    if not _finite(data.tax) or data.tax < 0:
        raise ValidationError("Tax must be a non-negative number.")
    if data.paymentMethod == "link" and not (data.linkPayUrl or "").strip():
        raise ValidationError("Payment URL is required for Link Pay.")


def _invoice_fields(data: InvoiceIn, totals: InvoiceTotals) -> dict:
    return {
        "invoice_number": data.invoiceNumber,
        "business_name": data.businessName.strip(),
        "business_address": data.businessAddress,
        "business_contact": data.businessContact,
        "client_name": data.clientName.strip(),
        "client_address": data.clientAddress,
        "client_contact": data.clientContact,
        "invoice_date": data.invoiceDate,
        "due_date": data.dueDate,
        "items": [i.model_dump() for i in data.items],
        "subtotal": totals.subtotal,
        "tax": _dec(data.tax),
        "tax_type": data.taxType,
        "total": totals.total,
        "notes": data.notes,
        "currency": data.currency,
        "payment_method": data.paymentMethod,
        "link_pay_url": data.linkPayUrl if data.paymentMethod == "link" else None,
    }


def invoice_to_dict(inv: Invoice) -> dict:
    return {
        "id": str(inv.id),
        "invoiceNumber": inv.invoice_number,
        "businessName": inv.business_name,
        "businessAddress": inv.business_address,
        "businessContact": inv.business_contact,
        "clientName": inv.client_name,
        "clientAddress": inv.client_address,
        "clientContact": inv.client_contact,
        "invoiceDate": inv.invoice_date,
        "dueDate": inv.due_date,
        "items": inv.items,
        "subtotal": float(inv.subtotal),
        "tax": float(inv.tax),
        "taxType": inv.tax_type,
        "total": float(inv.total),
        "notes": inv.notes,
        "currency": inv.currency,
        "paymentMethod": inv.payment_method,
        "linkPayUrl": inv.link_pay_url,
        "status": inv.status,
        "createdAt": inv.created_at.isoformat() if inv.created_at else None,
    }


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": str(t.id),
        "type": t.type,
        "amount": float(t.amount),
        "currency": t.currency,
        "category": t.category,
        "description": t.description,
        "date": t.date,
        "status": t.status,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }


def _valid_id(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


# ===== Invoices =====
async def get_invoice(user: User, invoice_id: str) -> Invoice:
    if not _valid_id(invoice_id):
        raise InvoiceNotFound()
    inv = await Invoice.get_or_none(id=invoice_id, owner_id=user.id)
    if inv is None:
        raise InvoiceNotFound()
    return inv


async def list_invoices(user: User) -> List[Invoice]:
    return await Invoice.filter(owner_id=user.id).order_by("-created_at")


async def create_invoice(user: User, data: InvoiceIn) -> tuple[Invoice, DebitResult]:
    """
    Validate, charge invoice-generator, store the invoice and record the
    matching pending income transaction.
    """
    validate_invoice(data)
    charge = await require_credits(user, Feature.INVOICE_GENERATOR)
    totals = compute_totals(data.items, data.tax, data.taxType)

    inv = await Invoice.create(owner_id=user.id, **_invoice_fields(data, totals))
    await Transaction.create(
        owner_id=user.id,
        type="income",
        amount=totals.total,
        currency=data.currency,
        category="Invoice",
        description=f"Invoice {data.invoiceNumber} to {data.clientName.strip()}",
        date=data.invoiceDate,
        status="pending",
    )
    logger.info("[invoices] created invoice=%s user=%s total=%s", inv.id, user.id, totals.total)
    return inv, charge


async def update_invoice(user: User, invoice_id: str, data: InvoiceIn) -> Invoice:
    inv = await get_invoice(user, invoice_id)
    validate_invoice(data)
    totals = compute_totals(data.items, data.tax, data.taxType)
    inv.update_from_dict(_invoice_fields(data, totals))
    await inv.save()
    return inv


async def delete_invoice(user: User, invoice_id: str) -> None:
    inv = await get_invoice(user, invoice_id)
    await inv.delete()


async def mark_invoice_paid(user: User, invoice_id: str) -> Invoice:
    inv = await get_invoice(user, invoice_id)
    inv.status = "paid"
    await inv.save(update_fields=["status"])
    return inv


# ===== Transactions =====
async def list_transactions(user: User) -> List[Transaction]:
    return await Transaction.filter(owner_id=user.id).order_by("-date", "-created_at")


async def add_transaction(user: User, data: TransactionIn) -> Transaction:
    if not _finite(data.amount) or data.amount <= 0:
        raise ValidationError("Amount must be greater than 0.")
    if not data.category.strip():
        raise ValidationError("Category is required.")
    return await Transaction.create(
        owner_id=user.id,
        type=data.type,
        amount=_dec(data.amount),
        currency=data.currency,
        category=data.category.strip(),
        description=data.description,
        date=data.date,
        status=data.status,
    )


async def delete_transaction(user: User, transaction_id: str) -> None:
    if not _valid_id(transaction_id):
        raise TransactionNotFound()
    deleted = await Transaction.filter(id=transaction_id, owner_id=user.id).delete()
    if not deleted:
        raise TransactionNotFound()


async def financial_advice(user: User, question: Optional[str] = None) -> tuple[FinancialAdvice, DebitResult]:
    """Charge accounting-ai and ask the analyst about the user's transactions."""
    transactions = await list_transactions(user)
    if not transactions:
        raise ValidationError("Please add some transactions first.")
    charge = await require_credits(user, Feature.ACCOUNTING_AI)
    rows = [
        {"type": t.type, "amount": float(t.amount), "category": t.category, "currency": t.currency, "date": t.date}
        for t in transactions
    ]
    advice = await content_generator.financial_advice(rows, (question or "").strip() or None)
    return advice, charge
