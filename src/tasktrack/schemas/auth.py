"""Pydantic schemas for registration and login.

UserRead is the only shape a user ever leaves the API in: id, name,
email. The password hash has no schema at all.
"""

import uuid

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str
    user: UserRead
    token: str


class LoginResponse(BaseModel):
    token: str
    user: UserRead
