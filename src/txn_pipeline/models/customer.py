"""Customer model."""

from datetime import datetime

from pydantic import BaseModel, Field


class Address(BaseModel):
    """Postal address with geolocation."""

    street: str = Field(..., examples=["123 Main St"])
    city: str = Field(..., examples=["Los Angeles"])
    state: str = Field(..., examples=["CA"])
    zip_code: str = Field(..., min_length=5, max_length=10, examples=["90012"])
    country: str = Field(default="USA")
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Customer(BaseModel):
    """A card holder.

    The behavioral summary fields are advisory hints for downstream
    consumers; the generator does not enforce them on synthesized
    transactions.
    """

    id: str = Field(..., description="Opaque unique identifier")
    first_name: str
    last_name: str
    email: str = Field(
        ...,
        description="Unique within the dataset",
        examples=["john.smith@example.com", "john.smith1@example.com"],
    )
    phone_number: str | None = Field(default=None, examples=["+1-213-555-0199"])
    address: Address
    average_transaction_amount: float | None = Field(
        default=None,
        ge=0.0,
        description="Typical spend per transaction",
    )
    typical_transaction_hours: str | None = Field(
        default=None,
        description="Comma-separated hours of day the customer usually transacts",
        examples=["9,10,11,12,13,14,15,16,17,18"],
    )
    created_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
