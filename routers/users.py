# routers/users.py
"""
User administration (admin only), plus self-service nickname/credentials.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from routers.deps import get_services
from schemas.user import CredentialsUpdate, NicknameUpdate, RoleUpdate, UserCreate, UserResponse
from services.container import Services
from utils.security import require_admin, verify_token

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
def list_users(services: Services = Depends(get_services), token: dict = Depends(require_admin)):
     return services.users.list_users()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, services: Services = Depends(get_services), token: dict = Depends(require_admin)):
     return services.users.create_user(body.discord_id, body.role.value, body.nickname or "")


@router.put("/{discord_id}", response_model=UserResponse)
def update_role(discord_id: str, body: RoleUpdate, services: Services = Depends(get_services), token: dict = Depends(require_admin)):
     return services.users.update_role(discord_id, body.role.value)


@router.delete("/{discord_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(discord_id: str, services: Services = Depends(get_services), token: dict = Depends(require_admin)):
     if discord_id == token["discordId"]:
          raise HTTPException(status_code=400, detail="Cannot delete your own account")
     services.users.delete_user(discord_id)


def _check_self_or_admin(discord_id: str, token: dict, services: Services) -> None:
     if discord_id != token["discordId"] and not services.users.is_admin(token["discordId"]):
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")


@router.put("/{discord_id}/nickname", response_model=UserResponse)
def update_nickname(discord_id: str, body: NicknameUpdate, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     _check_self_or_admin(discord_id, token, services)
     return services.users.update_nickname(discord_id, body.nickname)


@router.put("/{discord_id}/credentials", response_model=UserResponse)
def update_credentials(discord_id: str, body: CredentialsUpdate, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     _check_self_or_admin(discord_id, token, services)
     return services.users.update_credentials(discord_id, username=body.username, password=body.password)
