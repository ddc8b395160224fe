"""
Record schemas for the relay's two collections.

CallLog is keyed by the Twilio Call SID; Objection rows get a store-assigned id.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CallLog(BaseModel):
    """One record per inbound call-routing request."""
    id: str = Field(min_length=1, description="Twilio Call SID, used as the primary key")
    phone_number: str = Field(min_length=1, description="Destination number")
    status: str = Field(min_length=1, description="Free-text lifecycle label, e.g. 'initiated'")
    duration_seconds: Optional[float] = Field(
        default=None,
        description="Call length; filled in by status callbacks outside this service",
    )
    created_at: datetime = Field(default_factory=utc_now)


class Objection(BaseModel):
    """One record per successful objection/suggestion exchange."""
    id: Optional[int] = None
    message: str = Field(min_length=1)
    response: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=utc_now)
