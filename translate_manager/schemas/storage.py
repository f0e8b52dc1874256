from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class StoredObject(BaseModel):
    key: str = Field(..., description="Object key inside the bucket.")
    size: int = Field(0, description="Object size in bytes.")
    last_modified: datetime | None = Field(
        default=None,
        description="Timestamp the object was last written.",
    )


class StoredObjectListResponse(BaseModel):
    bucket: str
    prefix: str | None = None
    objects: list[StoredObject] = Field(default_factory=list)
