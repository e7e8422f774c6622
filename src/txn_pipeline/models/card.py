"""Payment card model."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field


class CardType(str, Enum):
    """Supported card brands."""

    VISA = "VISA"
    MASTERCARD = "MASTERCARD"


class Card(BaseModel):
    """A payment card owned by exactly one customer."""

    id: str
    customer_id: str = Field(..., description="Owning customer's id")
    card_number: str = Field(..., min_length=16, max_length=16, pattern=r"^\d+$")
    card_holder_name: str
    expiry_date: date
    cvv: str = Field(..., min_length=3, max_length=3)
    card_type: CardType
    credit_limit: float = Field(..., gt=0.0)
    available_balance: float = Field(..., ge=0.0)
    is_active: bool = Field(default=True)
    created_at: datetime
