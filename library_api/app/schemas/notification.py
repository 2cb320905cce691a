"""
Pydantic models for the notification feed polled by UI clients.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class NotificationRead(BaseModel):
    message: str
    kind: str
    created_at: datetime
    expires_at: datetime

    model_config = {
        "from_attributes": True,
    }


class NotificationFeed(BaseModel):
    notifications: List[NotificationRead]
    loading: Optional[str] = None
