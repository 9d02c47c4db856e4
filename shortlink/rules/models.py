from pydantic import BaseModel, Field

MAX_TTL_HOURS = 100 * 365 * 24


class LinksRules(BaseModel):
    base_url: str = "cli://"
    short_code_length: int = Field(default=7, ge=1)
    short_code_max_attempts: int = Field(default=100, ge=1)
    # +-100 years keeps now + ttl inside the datetime range
    default_ttl_hours: int = Field(default=24, ge=-MAX_TTL_HOURS, le=MAX_TTL_HOURS)
    default_click_limit: int | None = 10  # None => unlimited
    max_url_length: int = Field(default=2048, ge=1)
    allow_owner_edit_limit: bool = True

class CleanupRules(BaseModel):
    on_each_op: bool = True
    hard_delete_expired: bool = True
    hard_delete_limit_reached: bool = True

class EventsRules(BaseModel):
    enabled: bool = True

class StorageRules(BaseModel):
    data_dir: str = "data"
    id_prefix: str = "L"

class Rules(BaseModel):
    links: LinksRules = Field(default_factory=LinksRules)
    cleanup: CleanupRules = Field(default_factory=CleanupRules)
    events: EventsRules = Field(default_factory=EventsRules)
    storage: StorageRules = Field(default_factory=StorageRules)
