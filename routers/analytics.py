# routers/analytics.py
"""
Admin dashboards. ``start``/``end`` filter on the payment's creation day
(inclusive); the status summary always covers every payment.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from routers.deps import get_services
from schemas.analytics import OverviewResponse, OwnerStats, SourceStats, StatusCounts, TimelinePoint
from services.container import Services
from utils.security import require_admin

router = APIRouter(prefix="/api/analytics", tags=["analytics"], dependencies=[Depends(require_admin)])


@router.get("/overview", response_model=OverviewResponse)
def overview(start: Optional[date] = None, end: Optional[date] = None, services: Services = Depends(get_services)):
     return services.analytics.overview(start, end)


@router.get("/users", response_model=List[OwnerStats])
def per_owner(start: Optional[date] = None, end: Optional[date] = None, services: Services = Depends(get_services)):
     return services.analytics.by_owner(start, end)


@router.get("/sources", response_model=List[SourceStats])
def per_source(start: Optional[date] = None, end: Optional[date] = None, services: Services = Depends(get_services)):
     return services.analytics.by_source(start, end)


@router.get("/timeline", response_model=List[TimelinePoint])
def timeline(
     start: Optional[date] = None,
     end: Optional[date] = None,
     group_by: str = Query("day", alias="groupBy"),
     services: Services = Depends(get_services),
):
     return services.analytics.timeline(start, end, group_by)


@router.get("/status", response_model=StatusCounts)
def status_summary(services: Services = Depends(get_services)):
     return services.analytics.status()
