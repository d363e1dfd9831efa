"""
Pydantic schemas for the AI feature endpoints.
Output models live next to the prompts in services.content_generator.
"""
from typing import Literal

from pydantic import BaseModel, Field

class EmailIn(BaseModel):
    goal: str = Field(min_length=1)  # e.g. "Follow up with a client after a great meeting"
    tone: Literal["formal", "friendly", "marketing"] = "formal"

class StartupIdeaIn(BaseModel):
    idea: str = Field(min_length=1)

class DocumentIn(BaseModel):
    documentDataUri: str  # data:<mime>;base64,<payload>
    filename: str = "document"
