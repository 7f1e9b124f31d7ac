# schemas/analytics.py
"""
Response shapes for the analytics endpoints. Amounts are JSON numbers.
"""
from typing import List, Union

from schemas.base import CamelModel

Amount = Union[int, float]


class OverviewResponse(CamelModel):
     total_payments: int
     paid_payments: int
     unpaid_payments: int
     total_revenue: Amount


class _Breakdown(CamelModel):
     total_payments: int
     paid_payments: int
     unpaid_payments: int
     total_amount: Amount
     paid_amount: Amount


class OwnerStats(_Breakdown):
     owner_id: str


class SourceStats(_Breakdown):
     source: str


class TimelinePoint(CamelModel):
     date: str
     count: int
     amount: Amount


class StatusCounts(CamelModel):
     paid: int
     unpaid: int
