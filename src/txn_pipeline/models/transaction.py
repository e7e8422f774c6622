"""Card transaction domain model."""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator


class MerchantLocation(BaseModel):
    """Where the merchant is located."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    city: str
    country: str


class DeviceInfo(BaseModel):
    """Device used for an online (card-not-present) purchase."""

    device_id: str = Field(..., examples=["DEV_4821"])
    device_type: str = Field(..., examples=["MOBILE", "DESKTOP", "TABLET"])
    ip_address: str = Field(..., examples=["192.168.10.42"])
    user_agent: str


class Transaction(BaseModel):
    """A synthesized card transaction.

    ``transaction_type`` is kept as a plain string so that records loaded
    from storage can carry values the wire schema does not know about; the
    schema mapper rejects those.
    """

    id: str
    card_id: str
    customer_id: str
    amount: float = Field(..., gt=0.0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    merchant_id: str
    merchant_name: str
    merchant_category: str | None = None
    merchant_location: MerchantLocation | None = None
    transaction_type: str = Field(..., examples=["ONLINE", "POS"])
    is_card_present: bool
    device_info: DeviceInfo | None = None
    transaction_timestamp: datetime
    status: str = Field(default="APPROVED")
    previous_transaction_id: str | None = Field(
        default=None,
        description="Advisory link to an earlier transaction; not enforced",
    )

    @property
    def is_online(self) -> bool:
        return self.transaction_type == "ONLINE"

    @model_validator(mode="after")
    def _check_presence_matches_channel(self) -> "Transaction":
        if self.transaction_type in ("ONLINE", "POS"):
            if self.is_card_present == self.is_online:
                raise ValueError("is_card_present must be the inverse of online")
        return self
