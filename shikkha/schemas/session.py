"""
Session and synchronization state schemas for Shikkha.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class SyncState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    READY = "ready"


class Identity(BaseModel):
    uid: str = Field(..., min_length=1)
    is_anonymous: bool = True
    established_at: datetime = Field(default_factory=datetime.now)
