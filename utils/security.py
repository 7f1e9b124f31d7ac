# utils/security.py
"""
Password hashing and JWT helpers, plus the FastAPI auth dependencies.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request, status
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from config import JWT_ALGORITHM, JWT_EXPIRES_HOURS, JWT_SECRET

logger = logging.getLogger(__name__)

# Bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
     return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
     if not hashed:
          return False
     try:
          return pwd_context.verify(password, hashed)
     except ValueError:
          # not a bcrypt hash
          return False


def create_access_token(user: Dict[str, Any], expires_hours: int = JWT_EXPIRES_HOURS) -> str:
     payload = {
          "discordId": user["discordId"],
          "username": user.get("username") or "",
          "role": user.get("role") or "",
          "exp": datetime.now(timezone.utc) + timedelta(hours=expires_hours),
     }
     return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
     """Raises JWTError (ExpiredSignatureError included) for bad tokens."""
     return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


# Token Auth Dependency
def verify_token(request: Request) -> Dict[str, Any]:
     auth = request.headers.get("Authorization")
     if not auth or not auth.startswith("Bearer "):
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
     token = auth.split(" ", 1)[1]
     try:
          payload = decode_token(token)
     except ExpiredSignatureError:
          logger.info("Expired token presented")
          raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
     except JWTError:
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")
     if not payload.get("discordId"):
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")
     return payload


def require_admin(request: Request, token: dict = Depends(verify_token)) -> Dict[str, Any]:
     """Role is re-read from the user service so a demotion takes effect before the token expires."""
     users = request.app.state.services.users
     if not users.is_admin(token["discordId"]):
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
     return token
