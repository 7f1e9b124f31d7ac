# schemas/payment.py
"""
Pydantic schemas for the payments API.

Numeric inputs accept numbers or display strings ("50,000"); the ledger does
the parsing so every entry point shares one set of rules.
"""
from typing import Optional, Union

from pydantic import ConfigDict, Field

from schemas.base import CamelModel

NumberInput = Union[int, float, str]


class PaymentCreate(CamelModel):
     """Body for POST /api/payments. Any total sent by the client is ignored."""

     owner_id: Optional[str] = Field(None, description="Discord id of the payee; defaults to the caller")
     quantity: Optional[NumberInput] = Field(None, description="Quantity")
     unit_price: Optional[NumberInput] = Field(None, description="Price per unit")
     due_at: Optional[str] = Field(None, description="'DD/MM/YYYY HH:MM:SS' or ISO 8601; defaults to now + configured hours")
     source: Optional[str] = None
     method: Optional[str] = None
     currency: Optional[str] = None
     card_number: Optional[str] = None
     iban_or_sheba: Optional[str] = None
     payee_name: Optional[str] = None
     wallet_address: Optional[str] = None
     external_wallet_address: Optional[str] = None
     note: Optional[str] = None
     admin_note: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "ownerId": "180032303303491584",
                    "quantity": 10,
                    "unitPrice": "5,000",
                    "source": "Realm A",
                    "method": "Card",
                    "currency": "Toman",
                    "cardNumber": "6037-0000-0000-0000",
                    "payeeName": "Ali",
               }
          },
     )


class PaymentUpdate(CamelModel):
     """Partial update. An explicit total is stored as given and audited as an override."""

     owner_id: Optional[str] = None
     quantity: Optional[NumberInput] = None
     unit_price: Optional[NumberInput] = None
     total: Optional[NumberInput] = None
     due_at: Optional[str] = None
     source: Optional[str] = None
     method: Optional[str] = None
     currency: Optional[str] = None
     card_number: Optional[str] = None
     iban_or_sheba: Optional[str] = None
     payee_name: Optional[str] = None
     wallet_address: Optional[str] = None
     external_wallet_address: Optional[str] = None
     note: Optional[str] = None
     admin_note: Optional[str] = None
     paid_flag: Optional[Union[bool, int, str]] = None


class PaidFlagUpdate(CamelModel):
     paid: bool = Field(..., description="New paid state")


class PaymentCreated(CamelModel):
     unique_id: str
     total: str = Field(..., description="Computed total as a bare numeric string")


class PaymentResponse(CamelModel):
     """Read-path record: display-formatted numbers, boolean paid flag."""

     unique_id: str
     created_at: str
     due_at: str
     owner_id: str
     quantity: str
     unit_price: str
     total: str
     source: str
     method: str
     currency: str
     card_number: str
     iban_or_sheba: str
     payee_name: str
     note: str
     status: str
     paid_flag: bool
     wallet_address: str
     external_wallet_address: str
     admin_note: str


class PaymentChanges(CamelModel):
     unique_id: str
     changes: dict = Field(default_factory=dict, description="field -> {old, new}")
