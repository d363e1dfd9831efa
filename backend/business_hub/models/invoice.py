"""
Database model for invoices.
The field set is the contract the PDF renderer consumes, so it mirrors the
invoice form one to one.
"""
import uuid
from tortoise import fields, models

class Invoice(models.Model):
    """
    Invoice database model.

    - items: JSON list of {"description": str, "quantity": number, "price": number}
    - subtotal / total: stored as computed at save time
    - tax: a percentage or a flat amount depending on tax_type
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner = fields.ForeignKeyField("models.User", related_name="invoices", on_delete=fields.CASCADE)

    invoice_number = fields.CharField(max_length=64)
    business_name = fields.CharField(max_length=256)
    business_address = fields.CharField(max_length=512, default="")
    business_contact = fields.CharField(max_length=256, null=True)
    client_name = fields.CharField(max_length=256)
    client_address = fields.CharField(max_length=512, null=True)
    client_contact = fields.CharField(max_length=256, null=True)
    invoice_date = fields.CharField(max_length=64)  # ISO-8601 string as entered
    due_date = fields.CharField(max_length=64)

    items = fields.JSONField(default=list)
    subtotal = fields.DecimalField(max_digits=14, decimal_places=2)
    tax = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    tax_type = fields.CharField(max_length=16, default="percentage")  # "percentage" or "amount"
    total = fields.DecimalField(max_digits=14, decimal_places=2)

    notes = fields.TextField(null=True)
    currency = fields.CharField(max_length=8, default="USD")  # "USD" or "INR"
    payment_method = fields.CharField(max_length=16, default="none")  # "link" or "none"
    link_pay_url = fields.CharField(max_length=1024, null=True)
    status = fields.CharField(max_length=16, default="unpaid")  # "unpaid" or "paid"

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "invoices"
