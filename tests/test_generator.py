"""Tests for the EntityGenerator class."""

from datetime import date

import numpy as np
import pytest

from txn_pipeline import generator as generator_module
from txn_pipeline.errors import UniqueConstraintExhaustedError
from txn_pipeline.generator import (
    MAX_EMAIL_ATTEMPTS,
    REFERENCE_LATITUDE,
    REFERENCE_LONGITUDE,
    EntityGenerator,
)
from txn_pipeline.models import CardType


class TestUniqueEmail:
    """Tests for email de-duplication within one run."""

    def test_base_email_when_unused(self, entity_generator: EntityGenerator):
        email = entity_generator.unique_email("John", "Smith", set())
        assert email == "john.smith@example.com"

    def test_collision_appends_suffix(self, entity_generator: EntityGenerator):
        """Second john.smith becomes john.smith1."""
        used = {"john.smith@example.com"}
        email = entity_generator.unique_email("John", "Smith", used)
        assert email == "john.smith1@example.com"

    def test_suffix_increases(self, entity_generator: EntityGenerator):
        used = {
            "john.smith@example.com",
            "john.smith1@example.com",
            "john.smith2@example.com",
        }
        email = entity_generator.unique_email("John", "Smith", used)
        assert email == "john.smith3@example.com"

    def test_exhausted_attempts_raise(self, entity_generator: EntityGenerator):
        used = {"john.smith@example.com"} | {
            f"john.smith{i}@example.com" for i in range(1, MAX_EMAIL_ATTEMPTS + 1)
        }
        with pytest.raises(UniqueConstraintExhaustedError) as exc_info:
            entity_generator.unique_email("John", "Smith", used)
        assert exc_info.value.attempts == MAX_EMAIL_ATTEMPTS


class TestCustomerGeneration:
    """Tests for generated customers."""

    def test_emails_pairwise_distinct(self, entity_generator: EntityGenerator):
        """400 draws from a 20x20 name pool must still yield distinct emails."""
        used: set[str] = set()
        emails = [entity_generator.generate_customer(used).email for _ in range(400)]
        assert len(set(emails)) == len(emails)
        assert used == set(emails)

    def test_duplicate_name_gets_suffixed_email(self, monkeypatch):
        monkeypatch.setattr(generator_module, "FIRST_NAMES", ("John",))
        monkeypatch.setattr(generator_module, "LAST_NAMES", ("Smith",))
        generator = EntityGenerator(seed=1)
        used: set[str] = set()

        first = generator.generate_customer(used)
        second = generator.generate_customer(used)

        assert first.email == "john.smith@example.com"
        assert second.email == "john.smith1@example.com"

    def test_address_within_bounding_box(self, entity_generator: EntityGenerator):
        used: set[str] = set()
        for _ in range(50):
            address = entity_generator.generate_customer(used).address
            assert abs(address.latitude - REFERENCE_LATITUDE) <= 5.0
            assert abs(address.longitude - REFERENCE_LONGITUDE) <= 5.0
            assert address.state == "CA"
            assert address.country == "USA"
            assert len(address.zip_code) == 5

    def test_behavioral_summary(self, entity_generator: EntityGenerator):
        customer = entity_generator.generate_customer(set())
        assert 50.0 <= customer.average_transaction_amount <= 250.0
        assert customer.typical_transaction_hours == "9,10,11,12,13,14,15,16,17,18"

    def test_phone_format(self, entity_generator: EntityGenerator):
        phone = entity_generator.generate_customer(set()).phone_number
        assert phone.startswith("+1-")
        assert [len(part) for part in phone[3:].split("-")] == [3, 3, 4]

    def test_seeded_generators_agree(self):
        """Same seed produces the same customers."""
        a = EntityGenerator(seed=99).generate_customer(set())
        b = EntityGenerator(seed=99).generate_customer(set())
        assert a.id == b.id
        assert a.email == b.email
        assert a.address.street == b.address.street


class TestCardGeneration:
    """Tests for generated cards."""

    def test_card_number_brand_prefix(self, entity_generator: EntityGenerator):
        for _ in range(50):
            number, card_type = entity_generator.generate_card_number()
            assert len(number) == 16
            assert number.isdigit()
            expected = CardType.VISA if number[0] == "4" else CardType.MASTERCARD
            assert number[0] in ("4", "5")
            assert card_type == expected

    def test_card_belongs_to_customer(self, entity_generator: EntityGenerator):
        customer = entity_generator.generate_customer(set())
        card = entity_generator.generate_card(customer)
        assert card.customer_id == customer.id
        assert card.card_holder_name == f"{customer.first_name} {customer.last_name}"

    def test_card_is_active_with_bounded_amounts(
        self, entity_generator: EntityGenerator
    ):
        customer = entity_generator.generate_customer(set())
        for card in entity_generator.generate_cards(customer, 30):
            assert card.is_active is True
            assert 5000.0 <= card.credit_limit <= 15000.0
            assert 1000.0 <= card.available_balance <= 5000.0
            assert len(card.cvv) == 3

    def test_expiry_three_years_out(self, entity_generator: EntityGenerator):
        customer = entity_generator.generate_customer(set())
        card = entity_generator.generate_card(customer)
        assert card.expiry_date.year == date.today().year + 3

    def test_injected_rng_is_used(self):
        rng = np.random.default_rng(5)
        generator = EntityGenerator(rng=rng)
        assert generator.rng is rng
