"""Pydantic schemas for items.

Learn: Separate "Create"/"Update" schemas (input) from "Read" (output).
Neither input schema has an owner_id field, and unknown keys are ignored,
so a client cannot pick the owner of what it creates.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

STATUS_PATTERN = r"^(pending|in_progress|done)$"


class ItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: str = Field(default="pending", pattern=STATUS_PATTERN)


class ItemUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = Field(None, pattern=STATUS_PATTERN)


class ItemRead(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
