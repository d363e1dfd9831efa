import uuid
from tortoise import fields, models

class Transaction(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner = fields.ForeignKeyField("models.User", related_name="transactions", on_delete=fields.CASCADE)

    type = fields.CharField(max_length=16)  # "income" or "expense"
    amount = fields.DecimalField(max_digits=14, decimal_places=2)
    currency = fields.CharField(max_length=8, default="USD")
    category = fields.CharField(max_length=64)
    description = fields.CharField(max_length=512, null=True)
    date = fields.CharField(max_length=64)  # ISO-8601 string
    status = fields.CharField(max_length=16, default="paid")  # "paid" or "pending"

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "transactions"
