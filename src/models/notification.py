from typing import Optional

from pydantic import BaseModel, Field


class PushMessage(BaseModel):
    title: str
    body: str
    type: str
    data: dict[str, str] = Field(default_factory=dict)
    image_url: Optional[str] = None
    accent_color: Optional[str] = None
    high_priority: bool = False


class DeliveryResult(BaseModel):
    success: bool
    error: Optional[str] = None
