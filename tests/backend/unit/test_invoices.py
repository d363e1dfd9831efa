"""
Unit tests for services.invoices module.
Tests invoice totals and form validation.
"""
from decimal import Decimal

import pytest

from business_hub.core.errors import ValidationError
from business_hub.schemas.invoice import InvoiceIn, LineItem
from business_hub.services.invoices import compute_totals, validate_invoice


def make_invoice(**overrides) -> InvoiceIn:
    data = {
        "invoiceNumber": "INV-001",
        "businessName": "Acme Studio",
        "clientName": "Globex",
        "invoiceDate": "2026-03-01",
        "dueDate": "2026-03-31",
        "items": [
            {"description": "Design", "quantity": 2, "price": 50},
            {"description": "Review", "quantity": 1, "price": 30},
        ],
        "tax": 10,
        "taxType": "percentage",
    }
    data.update(overrides)
    return InvoiceIn(**data)


class TestComputeTotals:
    """Tests for subtotal, tax and total computation."""

    def test_percentage_tax(self):
        items = [LineItem(description="a", quantity=2, price=50), LineItem(description="b", quantity=1, price=30)]
        totals = compute_totals(items, 10, "percentage")
        assert totals.subtotal == Decimal("130.00")
        assert totals.tax_amount == Decimal("13.00")
        assert totals.total == Decimal("143.00")

    def test_amount_tax_is_added_as_is(self):
        items = [LineItem(description="a", quantity=3, price=20)]
        totals = compute_totals(items, 7.5, "amount")
        assert totals.subtotal == Decimal("60.00")
        assert totals.total == Decimal("67.50")

    def test_fractional_prices_round_at_output(self):
        """0.1 + 0.2 style float drift does not leak into the totals."""
        items = [LineItem(description="a", quantity=1, price=0.1), LineItem(description="b", quantity=1, price=0.2)]
        totals = compute_totals(items, 0, "percentage")
        assert totals.subtotal == Decimal("0.30")
        assert totals.total == Decimal("0.30")

    def test_rounding_half_up_on_tax(self):
        items = [LineItem(description="a", quantity=1, price=10.05)]
        totals = compute_totals(items, 5, "percentage")
        # 10.05 * 5% = 0.5025
        assert totals.tax_amount == Decimal("0.50")
        assert totals.total == Decimal("10.55")

    def test_no_items(self):
        totals = compute_totals([], 10, "percentage")
        assert totals.total == Decimal("0.00")


class TestValidateInvoice:
    """Tests for local form checks."""

    def test_valid_invoice_passes(self):
        validate_invoice(make_invoice())

    def test_names_required(self):
        with pytest.raises(ValidationError) as exc:
            validate_invoice(make_invoice(clientName="  "))
        assert exc.value.message == "Business Name and Client Name are required."

    def test_line_items_must_be_complete(self):
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(items=[{"description": "x", "quantity": 0, "price": 10}]))
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(items=[{"description": "", "quantity": 1, "price": 10}]))
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(items=[{"description": "x", "quantity": 1, "price": -1}]))

    def test_at_least_one_item(self):
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(items=[]))

    def test_link_pay_needs_url(self):
        with pytest.raises(ValidationError) as exc:
            validate_invoice(make_invoice(paymentMethod="link"))
        assert exc.value.message == "Payment URL is required for Link Pay."
        validate_invoice(make_invoice(paymentMethod="link", linkPayUrl="https://pay.example.com/inv-001"))

    def test_negative_tax_rejected(self):
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(tax=-1))

    def test_non_finite_numbers_rejected(self):
        """NaN slips past plain range comparisons; it must still fail validation."""
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(items=[{"description": "x", "quantity": float("nan"), "price": 10}]))
        with pytest.raises(ValidationError):
            validate_invoice(make_invoice(items=[{"description": "x", "quantity": 1, "price": float("inf")}]))
        with pytest.raises(ValidationError) as exc:
            validate_invoice(make_invoice(tax=float("nan")))
        assert exc.value.message == "Tax must be a non-negative number."
