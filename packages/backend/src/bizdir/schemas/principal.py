"""Pydantic schemas for principals: admin users, agents, operators.

"Create" schemas are input, "Read" schemas are output. No Read schema
has a password field, so a stored hash can never reach a client.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
EMAIL_PATTERN = r"^\S+@\S+\.\S+$"
CODE_PATTERN = r"^[A-Za-z0-9_-]+$"


# ─── Login ──────────────────────────────────────────────

class LoginRequest(BaseModel):
    """Portal login: identifier is an email or a phone number."""
    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminLoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: str = Field(default="user", pattern=r"^(user|admin|editor|operator)$")


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)

    @field_validator("new_password")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("New password is required")
        return value


# ─── Admin users ────────────────────────────────────────

class AdminUserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    is_email_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class RoleUpdate(BaseModel):
    role: str = Field(..., pattern=r"^(user|admin|editor|operator)$")


# ─── Agents ─────────────────────────────────────────────

class AgentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6)
    agent_code: str = Field(..., min_length=1, max_length=50, pattern=CODE_PATTERN)
    panel_text: str = Field(default="", max_length=500)
    panel_text_color: str = Field(default="black", pattern=r"^(red|green|blue|black)$")


class AgentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    panel_text: Optional[str] = Field(None, max_length=500)
    panel_text_color: Optional[str] = Field(None, pattern=r"^(red|green|blue|black)$")


class AgentRead(BaseModel):
    id: uuid.UUID
    name: str
    phone: str
    email: str
    agent_code: str
    panel_text: str
    panel_text_color: str
    total_shops: int
    total_earnings: int
    created_at: datetime

    model_config = {"from_attributes": True}


# ─── Operators ──────────────────────────────────────────

class OperatorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6)
    operator_code: str = Field(..., min_length=1, max_length=50, pattern=CODE_PATTERN)


class OperatorUpdate(BaseModel):
    """Profile fields only. Activation changes need delete rights."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)


class OperatorRead(BaseModel):
    id: uuid.UUID
    name: str
    phone: str
    email: str
    operator_code: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
