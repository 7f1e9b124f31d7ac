# routers/auth.py
"""
Login endpoints. Both paths end in the same JWT; Discord logins go through
``UserService.resolve_login`` (default admins, first-account Admin).
"""
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from routers.deps import get_services
from schemas.auth import LoginRequest, TokenResponse
from schemas.user import UserResponse
from services.container import Services
from services.errors import NotFound
from utils import discord_oauth
from utils.security import create_access_token, verify_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, services: Services = Depends(get_services)):
     user = services.users.authenticate(body.username, body.password)
     return {"token": create_access_token(user), "user": user}


@router.get("/discord")
def discord_login():
     return RedirectResponse(discord_oauth.authorize_url())


@router.get("/discord/callback", response_model=TokenResponse)
def discord_callback(code: str, services: Services = Depends(get_services)):
     profile = discord_oauth.exchange_code(code)
     user = services.users.resolve_login(profile["discordId"], profile["nickname"])
     return {"token": create_access_token(user), "user": user}


@router.get("/me", response_model=UserResponse)
def me(services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     user = services.users.get_user(token["discordId"])
     if user is None:
          raise NotFound("User not found", field="discordId")
     return user
