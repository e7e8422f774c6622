"""Randomized customer and card generation for seeding the dataset."""

import uuid
from datetime import date, datetime, timezone

import numpy as np
from faker import Faker

from txn_pipeline.errors import UniqueConstraintExhaustedError
from txn_pipeline.models import Address, Card, CardType, Customer

FIRST_NAMES = (
    "John", "Jane", "Michael", "Sarah", "David",
    "Lisa", "Robert", "Maria", "William", "Elizabeth",
    "James", "Jennifer", "Thomas", "Linda", "Christopher",
    "Susan", "Daniel", "Jessica", "Matthew", "Karen",
)  # fmt: skip
LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones",
    "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson",
    "Thomas", "Taylor", "Moore", "Jackson", "Martin",
)  # fmt: skip
CITIES = (
    "New York", "Los Angeles", "Chicago", "Houston", "Phoenix",
    "Philadelphia", "San Antonio", "San Diego", "Dallas", "San Jose",
)  # fmt: skip

EMAIL_DOMAIN = "example.com"
MAX_EMAIL_ATTEMPTS = 100

# Reference point for generated coordinates (downtown Los Angeles)
REFERENCE_LATITUDE = 34.0522
REFERENCE_LONGITUDE = -118.2437
COORDINATE_SPREAD = 10.0

# Leading digit identifies the brand
CARD_BRAND_PREFIXES = {"4": CardType.VISA, "5": CardType.MASTERCARD}
CARD_BODY_DIGITS = 15
CARD_VALIDITY_YEARS = 3

TYPICAL_HOURS = ",".join(str(h) for h in range(9, 19))


def random_coordinates(
    rng: np.random.Generator,
    spread: float = COORDINATE_SPREAD,
) -> tuple[float, float]:
    """Sample a point in a box of ``spread`` degrees around the reference point."""
    latitude = REFERENCE_LATITUDE + (float(rng.random()) - 0.5) * spread
    longitude = REFERENCE_LONGITUDE + (float(rng.random()) - 0.5) * spread
    return round(latitude, 6), round(longitude, 6)


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year + years, day=28)


class EntityGenerator:
    """Generator for synthetic customers and their cards.

    Email uniqueness is tracked by the caller through a set of emails
    already used in the current initialization run, so the generator
    itself stays free of run state.
    """

    def __init__(
        self,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ):
        """Initialize the generator.

        Args:
            seed: Random seed for reproducibility.
            rng: Explicit numpy generator. Takes precedence over ``seed``.
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.faker = Faker("en_US")
        if seed is not None:
            self.faker.seed_instance(seed)

    def _choice(self, options: tuple[str, ...]) -> str:
        return options[int(self.rng.integers(0, len(options)))]

    def _generate_id(self) -> str:
        return str(uuid.UUID(bytes=self.rng.bytes(16), version=4))

    def unique_email(
        self, first_name: str, last_name: str, used_emails: set[str]
    ) -> str:
        """Derive an email for the name that is not yet in ``used_emails``.

        The base form is ``first.last@example.com``; on collision an
        increasing numeric suffix is appended to the local part
        (``first.last1@example.com``, ``first.last2@...``).

        Raises:
            UniqueConstraintExhaustedError: If every suffix up to
                MAX_EMAIL_ATTEMPTS is taken.
        """
        local = f"{first_name.lower()}.{last_name.lower()}"
        email = f"{local}@{EMAIL_DOMAIN}"
        if email not in used_emails:
            return email

        for suffix in range(1, MAX_EMAIL_ATTEMPTS + 1):
            email = f"{local}{suffix}@{EMAIL_DOMAIN}"
            if email not in used_emails:
                return email

        raise UniqueConstraintExhaustedError(
            f"{local}@{EMAIL_DOMAIN}", MAX_EMAIL_ATTEMPTS
        )

    def _generate_phone(self) -> str:
        area, exchange, line = (
            int(self.rng.integers(0, 1000)),
            int(self.rng.integers(0, 1000)),
            int(self.rng.integers(0, 10000)),
        )
        return f"+1-{area:03d}-{exchange:03d}-{line:04d}"

    def _generate_address(self) -> Address:
        latitude, longitude = random_coordinates(self.rng)
        return Address(
            street=self.faker.street_address(),
            city=self._choice(CITIES),
            state="CA",
            zip_code=f"{int(self.rng.integers(0, 100000)):05d}",
            country="USA",
            latitude=latitude,
            longitude=longitude,
        )

    def generate_customer(self, used_emails: set[str]) -> Customer:
        """Generate a customer whose email is unique within ``used_emails``.

        The chosen email is added to ``used_emails``.

        Raises:
            UniqueConstraintExhaustedError: If no unique email could be derived.
        """
        first_name = self._choice(FIRST_NAMES)
        last_name = self._choice(LAST_NAMES)
        email = self.unique_email(first_name, last_name, used_emails)
        used_emails.add(email)

        return Customer(
            id=self._generate_id(),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone_number=self._generate_phone(),
            address=self._generate_address(),
            average_transaction_amount=round(50.0 + float(self.rng.random()) * 200, 2),
            typical_transaction_hours=TYPICAL_HOURS,
            created_at=datetime.now(timezone.utc),
        )

    def generate_card_number(self) -> tuple[str, CardType]:
        """Generate a 16-digit card number and the brand its prefix implies."""
        prefix = self._choice(tuple(CARD_BRAND_PREFIXES))
        body = int(self.rng.integers(0, 10**CARD_BODY_DIGITS))
        return f"{prefix}{body:0{CARD_BODY_DIGITS}d}", CARD_BRAND_PREFIXES[prefix]

    def generate_card(self, customer: Customer) -> Card:
        """Generate an active card owned by ``customer``."""
        card_number, card_type = self.generate_card_number()
        return Card(
            id=self._generate_id(),
            customer_id=customer.id,
            card_number=card_number,
            card_holder_name=customer.full_name,
            expiry_date=_add_years(date.today(), CARD_VALIDITY_YEARS),
            cvv=f"{int(self.rng.integers(0, 1000)):03d}",
            card_type=card_type,
            credit_limit=round(5000.0 + float(self.rng.random()) * 10000, 2),
            available_balance=round(1000.0 + float(self.rng.random()) * 4000, 2),
            is_active=True,
            created_at=datetime.now(timezone.utc),
        )

    def generate_cards(self, customer: Customer, count: int) -> list[Card]:
        return [self.generate_card(customer) for _ in range(count)]
