# routers/payment_info.py
from fastapi import APIRouter, Depends

from routers.deps import get_services
from schemas.payment_info import PaymentInfoOptions
from services.container import Services

router = APIRouter(prefix="/api/payment-info", tags=["payment-info"])


@router.get("", response_model=PaymentInfoOptions)
def payment_info(services: Services = Depends(get_services)):
     """Payment sources, methods, currencies and due-date options."""
     return services.payment_info.options()
