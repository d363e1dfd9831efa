"""
Pydantic schemas for co-working room endpoints.
"""
from typing import Optional

from pydantic import BaseModel, Field

class CreateRoomIn(BaseModel):
    """
    Request model for creating a room.
    maxMembers falls back to the configured default when omitted.
    """
    name: str = Field(min_length=1, max_length=128)
    organizationLabel: str = Field(default="", max_length=128)
    maxMembers: Optional[int] = Field(default=None, ge=1, le=500)

class SendMessageIn(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
