"""
User Domain Model (lightweight, checkout context only)
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class User(BaseModel):
    """Account that owns orders. Guest checkouts create one with an unusable password."""

    id: int = Field(..., description="User ID")
    email: str = Field(..., description="Login email")
    name: Optional[str] = Field(None, description="Display name")
    role: str = Field("CUSTOMER", description="Account role")
    email_verified: bool = Field(False, description="Whether the email was verified")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
