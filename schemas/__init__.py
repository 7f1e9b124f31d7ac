# schemas/__init__.py
from .payment import (
     PaymentCreate,
     PaymentUpdate,
     PaidFlagUpdate,
     PaymentCreated,
     PaymentResponse,
     PaymentChanges,
)
from .audit import AuditEntryResponse, AuditLogResponse
from .user import UserResponse, UserCreate, RoleUpdate, NicknameUpdate, CredentialsUpdate
from .seller import SellerProfileUpdate, SellerProfileResponse
from .auth import LoginRequest, TokenResponse
from .payment_info import PaymentInfoOptions

__all__ = [
     "PaymentCreate",
     "PaymentUpdate",
     "PaidFlagUpdate",
     "PaymentCreated",
     "PaymentResponse",
     "PaymentChanges",
     "AuditEntryResponse",
     "AuditLogResponse",
     "UserResponse",
     "UserCreate",
     "RoleUpdate",
     "NicknameUpdate",
     "CredentialsUpdate",
     "SellerProfileUpdate",
     "SellerProfileResponse",
     "LoginRequest",
     "TokenResponse",
     "PaymentInfoOptions",
]
