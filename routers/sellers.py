# routers/sellers.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from routers.deps import get_services
from schemas.seller import SellerProfileResponse, SellerProfileUpdate
from services.container import Services
from utils.security import require_admin, verify_token

router = APIRouter(prefix="/api/sellers", tags=["sellers"])


@router.get("", response_model=List[SellerProfileResponse])
def list_sellers(services: Services = Depends(get_services), token: dict = Depends(require_admin)):
     return services.sellers.list()


@router.get("/{discord_id}", response_model=SellerProfileResponse)
def get_seller(discord_id: str, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     profile = services.sellers.get(discord_id)
     if profile is None:
          raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Seller info not found")
     return profile


@router.put("/{discord_id}", response_model=SellerProfileResponse)
def save_seller(discord_id: str, body: SellerProfileUpdate, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     if discord_id != token["discordId"] and not services.users.is_admin(token["discordId"]):
          raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed")
     return services.sellers.save(discord_id, body.model_dump(by_alias=True, exclude_unset=True))
