# schemas/seller.py
from typing import Optional

from schemas.base import CamelModel


class SellerProfileUpdate(CamelModel):
     card: Optional[str] = None
     sheba: Optional[str] = None
     name: Optional[str] = None
     phone: Optional[str] = None
     wallet: Optional[str] = None
     paypal_wallet: Optional[str] = None


class SellerProfileResponse(CamelModel):
     discord_id: str
     card: str = ""
     sheba: str = ""
     name: str = ""
     phone: str = ""
     wallet: str = ""
     paypal_wallet: str = ""
