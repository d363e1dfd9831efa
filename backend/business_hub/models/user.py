"""
Database model for user accounts.
Holds the identity returned to clients (id, display name, email, avatar),
authentication credentials and the per-user credit balance.
"""
import uuid
from tortoise import fields, models

class User(models.Model):
    """
    User account database model.

    Relationships:
    - Has many Invoices and Transactions (via related_name="invoices"/"transactions")
    - Has many Room presence entries (via related_name="presence")
    - Creator of Rooms (via related_name="created_rooms")

    Credits:
    - `credits` never goes below zero; debits use a conditional update
    - `credits_last_reset` is the calendar date of the last daily reset
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Stable identity id
    email = fields.CharField(max_length=256, unique=True, index=True)  # Login name
    display_name = fields.CharField(max_length=128, default="Anonymous")
    avatar_url = fields.CharField(max_length=1024, null=True)
    password_hash = fields.CharField(max_length=255, null=True)  # Null for OAuth-only accounts
    auth_provider = fields.CharField(max_length=16, default="password")  # "password" or an OAuth provider name
    role = fields.CharField(max_length=16, default="user")  # "user" or "admin"

    credits = fields.IntField(default=0)
    credits_last_reset = fields.DateField(null=True)  # Null until the first balance resolution

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    def identity(self) -> dict:
        """Public identity payload shared with clients and other room members."""
        return {
            "id": str(self.id),
            "displayName": self.display_name,
            "email": self.email,
            "avatarUrl": self.avatar_url or "",
        }
