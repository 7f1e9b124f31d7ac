# schemas/user.py
"""
Pydantic schemas for user administration.
"""
from enum import Enum
from typing import Optional

from pydantic import Field

from schemas.base import CamelModel


class RoleEnum(str, Enum):
     ADMIN = "Admin"
     USER = "User"


class UserResponse(CamelModel):
     discord_id: str
     role: str
     created_at: str = ""
     updated_at: str = ""
     nickname: str = ""
     username: str = ""


class UserCreate(CamelModel):
     discord_id: str = Field(..., min_length=1)
     role: RoleEnum = RoleEnum.USER
     nickname: Optional[str] = None


class RoleUpdate(CamelModel):
     role: RoleEnum


class NicknameUpdate(CamelModel):
     nickname: str


class CredentialsUpdate(CamelModel):
     username: Optional[str] = None
     password: Optional[str] = Field(None, description="Stored as a bcrypt hash")
