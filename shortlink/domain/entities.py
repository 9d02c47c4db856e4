from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class LinkStatus(str, Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    LIMIT_REACHED = "LIMIT_REACHED"
    # Reserved: explicit delete removes the record instead of tagging it.
    DELETED = "DELETED"


class EventType(str, Enum):
    INFO = "INFO"
    EXPIRED = "EXPIRED"
    LIMIT_REACHED = "LIMIT_REACHED"
    ERROR = "ERROR"


# --- Links ---

class ShortLink(BaseModel):
    """
    A short alias for a long URL, owned by one local user.

    Serialized with camelCase keys; timestamps are naive local date-times.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str
    owner_uuid: str | None = Field(default=None, alias="ownerUuid")
    long_url: str | None = Field(default=None, alias="longUrl")
    short_code: str | None = Field(default=None, alias="shortCode")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    expires_at: datetime | None = Field(default=None, alias="expiresAt")
    click_limit: int | None = Field(default=None, alias="clickLimit")
    click_count: int = Field(default=0, alias="clickCount")
    last_access_at: datetime | None = Field(default=None, alias="lastAccessAt")
    status: LinkStatus = LinkStatus.ACTIVE

    @property
    def limit_label(self) -> str:
        return "unlimited" if self.click_limit is None else str(self.click_limit)


# --- Users & Events ---

class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uuid: str
    created_at: datetime | None = Field(default=None, alias="createdAt")
    last_seen_at: datetime | None = Field(default=None, alias="lastSeenAt")


class EventLog(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ts: datetime
    type: EventType
    owner_uuid: str | None = Field(default=None, alias="ownerUuid")
    short_code: str | None = Field(default=None, alias="shortCode")
    message: str = ""
