"""
Database models for co-working rooms.
A Room owns its presence entries (Participant) and its append-only message
log (Message); deleting the room cascades to both.
"""
from tortoise import fields, models

class Room(models.Model):
    """
    Co-working room.

    Relationships:
    - Created by a User (back-reference only, the room does not own the user)
    - Has many Participants (presence entries, related_name="participants")
    - Has many Messages (related_name="messages")
    """
    id = fields.CharField(pk=True, max_length=16)  # Short random id shared with invitees
    name = fields.CharField(max_length=128)
    organization_label = fields.CharField(max_length=128, default="")  # Display only
    creator = fields.ForeignKeyField(
        "models.User",
        related_name="created_rooms",
        on_delete=fields.CASCADE,
    )
    max_members = fields.IntField()  # Fixed at creation
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "rooms"


class Participant(models.Model):
    """
    Presence entry: one user's live connection to one room.
    Written on join, removed on leave or by the connection's disconnect hook.
    """
    id = fields.IntField(pk=True)
    room = fields.ForeignKeyField("models.Room", related_name="participants", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="presence", on_delete=fields.CASCADE)
    display_name = fields.CharField(max_length=128)
    avatar_url = fields.CharField(max_length=1024, default="")
    joined_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "room_participants"
        unique_together = (("room", "user"),)

    def to_dict(self) -> dict:
        return {
            "id": str(self.user_id),
            "displayName": self.display_name,
            "avatarUrl": self.avatar_url,
        }


class Message(models.Model):
    # Auto-increment pk is the store-assigned ordering key
    id = fields.IntField(pk=True)
    room = fields.ForeignKeyField("models.Room", related_name="messages", on_delete=fields.CASCADE)
    sender_id = fields.CharField(max_length=64)
    sender_display_name = fields.CharField(max_length=128)
    sender_avatar_url = fields.CharField(max_length=1024, default="")
    content = fields.TextField()
    sent_at = fields.DatetimeField(auto_now_add=True)  # Server-assigned

    class Meta:
        table = "room_messages"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "roomId": self.room_id,
            "senderId": self.sender_id,
            "senderDisplayName": self.sender_display_name,
            "senderAvatarUrl": self.sender_avatar_url,
            "content": self.content,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
        }
