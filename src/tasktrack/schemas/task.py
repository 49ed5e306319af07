"""Pydantic schemas for tasks.

Learn: Separate schemas for create/update/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskUpdate: what you PUT to modify a task (all optional)
- TaskRead: what the API returns (owner_id is exposed as "owner")
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None


class TaskUpdate(BaseModel):
    """Partial update — only non-None fields are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[str] = Field(None, pattern=r"^(pending|completed)$")


class TaskRead(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    status: str
    owner: uuid.UUID = Field(validation_alias="owner_id")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str
