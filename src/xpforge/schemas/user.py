# src/xpforge/schemas/user.py

"""Pydantic schemas for the User resource."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ===============================================
# Base Schema: Defines shared attributes for creation
# ===============================================
class UserBase(BaseModel):
    """Shared properties for a user."""

    username: str = Field(..., min_length=1, max_length=64)


# ===============================================
# Create Schema: The auth collaborator supplies the identity
# ===============================================
class UserCreate(UserBase):
    """Properties to receive via API on create."""

    id: str = Field(..., pattern=r"^[A-Za-z0-9_-]{1,64}$")


# ===============================================
# Read Schema: Defines attributes for returning data
# ===============================================
class UserRead(UserBase):
    """Properties to return to the client."""

    id: str
    total_xp: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
