"""Wire-format record published to the transactions topic.

Field names on the wire are camelCase. Optional nested structures are
left out of the encoded payload entirely when absent; optional scalars
are sent as null.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for wire models: camelCase aliases, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TransactionType(str, Enum):
    """Closed set of transaction kinds understood by consumers."""

    ONLINE = "ONLINE"
    POS = "POS"


class WireMerchantLocation(WireModel):
    latitude: float
    longitude: float
    city: str
    country: str


class WireDeviceInfo(WireModel):
    device_id: str
    device_type: str
    ip_address: str
    user_agent: str


# Nested structures dropped from the payload instead of sent as null
OMIT_WHEN_ABSENT = ("merchant_location", "device_info")


class CardTransactionRecord(WireModel):
    """A card transaction as consumers on the bus see it."""

    transaction_id: str
    card_id: str
    customer_id: str
    transaction_timestamp: int = Field(
        ..., description="UTC epoch milliseconds", examples=[1735689600000]
    )
    transaction_amount: float
    currency: str
    merchant_id: str
    merchant_name: str
    merchant_category: str | None = None
    merchant_location: WireMerchantLocation | None = None
    transaction_type: TransactionType
    device_info: WireDeviceInfo | None = None
    is_card_present: bool
    previous_transaction_id: str | None = None
    status: str | None = None

    def to_payload(self) -> dict:
        """Wire dict with camelCase keys.

        Absent nested structures are left out; absent scalars are sent as
        explicit nulls so every record carries the same set of keys.
        """
        exclude = {name for name in OMIT_WHEN_ABSENT if getattr(self, name) is None}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
