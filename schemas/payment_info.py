# schemas/payment_info.py
from typing import List, Union

from schemas.base import CamelModel


class DueDateOption(CamelModel):
     title: str
     hours: Union[int, float]


class PaymentInfoOptions(CamelModel):
     payment_sources: List[str]
     payment_methods: List[str]
     currencies: List[str]
     due_date_options: List[DueDateOption]
     due_date_info: DueDateOption
