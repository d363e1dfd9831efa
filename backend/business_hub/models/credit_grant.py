from typing import Optional
from tortoise import fields, models

class CreditGrant(models.Model):
    """
    Entitlement record that keeps an account's balance at or above a floor.
    - email: account the grant applies to (matched case-insensitively, stored lower-case)
    - balance: credits the account is topped up to whenever it falls below
    - reason: free text, kept for audit
    - created_by: admin who issued the grant (null when seeded from configuration)
    """
    id = fields.IntField(pk=True)
    email = fields.CharField(max_length=256, unique=True, index=True)
    balance = fields.IntField()
    reason = fields.CharField(max_length=255, null=True)

    created_by: Optional[fields.ForeignKeyNullableRelation["User"]] = fields.ForeignKeyField(
        "models.User", related_name="issued_grants", null=True, on_delete=fields.SET_NULL
    )
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "credit_grants"
