# routers/payments.py
"""
Payments API.

Payments are addressed by their uniqueId; row positions never leave the
ledger. Any authenticated user can list, create and edit payments; marking
a payment paid and deleting one are admin actions.
"""
from typing import List

from fastapi import APIRouter, Depends, status

from routers.deps import get_services
from schemas.audit import AuditLogResponse
from schemas.payment import (
     PaidFlagUpdate,
     PaymentChanges,
     PaymentCreate,
     PaymentCreated,
     PaymentResponse,
     PaymentUpdate,
)
from services.container import Services
from utils.security import require_admin, verify_token

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
def list_payments(services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     """All payments, newest first (served from the payment-list cache when warm)."""
     return services.ledger.list_payments()


@router.get("/{unique_id}", response_model=PaymentResponse)
def get_payment(unique_id: str, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     return services.ledger.get(unique_id)


@router.post("", response_model=PaymentCreated, status_code=status.HTTP_201_CREATED)
def create_payment(body: PaymentCreate, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     data = body.model_dump(by_alias=True, exclude_none=True)
     data.setdefault("ownerId", token["discordId"])
     return services.ledger.create(data, actor_id=token["discordId"])


@router.put("/{unique_id}", response_model=PaymentChanges)
def update_payment(
     unique_id: str,
     body: PaymentUpdate,
     services: Services = Depends(get_services),
     token: dict = Depends(verify_token),
):
     patch = body.model_dump(by_alias=True, exclude_unset=True)
     changes = services.ledger.update(unique_id, patch, actor_id=token["discordId"])
     return {"uniqueId": unique_id, "changes": changes}


@router.put("/{unique_id}/paid", response_model=PaymentResponse)
def set_paid(
     unique_id: str,
     body: PaidFlagUpdate,
     services: Services = Depends(get_services),
     token: dict = Depends(require_admin),
):
     services.ledger.set_paid_flag(unique_id, body.paid, actor_id=token["discordId"])
     return services.ledger.get(unique_id)


@router.delete("/{unique_id}", response_model=PaymentResponse)
def delete_payment(unique_id: str, services: Services = Depends(get_services), token: dict = Depends(require_admin)):
     return services.ledger.delete(unique_id, actor_id=token["discordId"])


@router.get("/{unique_id}/logs", response_model=AuditLogResponse)
def payment_logs(unique_id: str, services: Services = Depends(get_services), token: dict = Depends(verify_token)):
     """Audit history, oldest first. Still available after the payment is deleted."""
     entries = services.ledger.history(unique_id)
     return {"paymentId": unique_id, "logs": [entry.to_dict() for entry in entries]}
