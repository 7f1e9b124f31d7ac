# schemas/auth.py
from pydantic import Field

from schemas.base import CamelModel
from schemas.user import UserResponse


class LoginRequest(CamelModel):
     username: str = Field(..., min_length=1)
     password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
     token: str
     user: UserResponse
