"""Chat message schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageCreate(BaseModel):
    """Schema for posting a chat message."""

    body: str = Field(..., min_length=1, max_length=2000)
    mentions: list[int] = Field(default_factory=list, description="Mentioned member ids")


class ChatMessageResponse(BaseModel):
    """Schema for chat messages returned by the API."""

    id: int
    sender_id: int
    body: str
    mentions: list[int]
    is_violation: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
