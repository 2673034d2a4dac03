from datetime import datetime, timedelta, timezone

import pytest

from dogwalk.domain.models import Booking, Dog, Payment, PaymentStatus, User, UserType
from dogwalk.domain.validation import validate_booking, validate_dog, validate_payment, validate_user
from dogwalk.errors import InvalidBooking, InvalidDog, InvalidPayment, InvalidUser

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_booking(**overrides) -> Booking:
    data = {
        "id": "b-1",
        "owner_id": "owner-1",
        "walker_id": "walker-1",
        "dog_ids": ["dog-1"],
        "scheduled_at": NOW + timedelta(hours=1),
    }
    data.update(overrides)
    return Booking(**data)


def make_payment(**overrides) -> Payment:
    data = {"id": "p-1", "amount": 1500, "payer_id": "owner-1", "payee_id": "walker-1"}
    data.update(overrides)
    return Payment(**data)


class TestValidateBooking:
    def test_valid_booking(self):
        result = validate_booking(make_booking(), now=NOW)
        assert result.ok
        result.raise_for_errors()

    @pytest.mark.parametrize("field", ["id", "owner_id", "walker_id"])
    def test_blank_ids_rejected(self, field):
        result = validate_booking(make_booking(**{field: "  "}), now=NOW)
        assert not result.ok
        assert result.error_type is InvalidBooking

    def test_empty_dog_ids_rejected(self):
        result = validate_booking(make_booking(dog_ids=[]), now=NOW)
        assert "at least one dog is required" in result.reasons

    def test_schedule_must_be_strictly_in_future(self):
        assert not validate_booking(make_booking(scheduled_at=NOW), now=NOW).ok
        assert not validate_booking(make_booking(scheduled_at=NOW - timedelta(minutes=1)), now=NOW).ok

    def test_collects_every_reason(self):
        result = validate_booking(make_booking(id="", dog_ids=[], scheduled_at=NOW), now=NOW)
        assert len(result.reasons) == 3
        with pytest.raises(InvalidBooking) as exc_info:
            result.raise_for_errors()
        assert exc_info.value.reasons == list(result.reasons)


class TestValidatePayment:
    def test_valid_payment(self):
        assert validate_payment(make_payment()).ok
        assert validate_payment(make_payment(status=PaymentStatus.PROCESSING)).ok

    @pytest.mark.parametrize("payer", ["u-1", "walker-1", ""])
    def test_payer_equal_to_payee_rejected(self, payer):
        result = validate_payment(make_payment(payer_id=payer, payee_id=payer))
        assert not result.ok
        with pytest.raises(InvalidPayment):
            result.raise_for_errors()

    @pytest.mark.parametrize("amount", [0, -1, -500])
    def test_non_positive_amount_rejected(self, amount):
        assert not validate_payment(make_payment(amount=amount)).ok

    def test_minimum_amount_accepted(self):
        assert validate_payment(make_payment(amount=1)).ok

    @pytest.mark.parametrize(
        "status", [PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED]
    )
    def test_non_initial_status_rejected(self, status):
        assert not validate_payment(make_payment(status=status)).ok

    def test_blank_id_rejected(self):
        assert "payment id is required" in validate_payment(make_payment(id="")).reasons


class TestValidateDog:
    def test_valid_dog(self):
        assert validate_dog(Dog(id="d-1", owner_id="o-1", name="Rex", breed="Beagle", age=4)).ok

    def test_invalid_dog(self):
        result = validate_dog(Dog(id="d-1", owner_id="o-1", name="x" * 51, breed="", age=31))
        assert result.error_type is InvalidDog
        assert len(result.reasons) == 3


class TestValidateUser:
    def test_valid_user(self):
        user = User(id="u-1", name="Ana", email="ana@example.com", phone_number="+1 555-123-4567")
        assert validate_user(user).ok

    def test_walker_with_parenthesised_phone(self):
        user = User(
            id="w-1", name="Ben", email="ben@walks.co.uk", phone_number="(555) 123-4567", user_type=UserType.WALKER
        )
        assert validate_user(user).ok

    def test_invalid_contact_details(self):
        result = validate_user(User(id="u-1", name="Ana", email="not-an-email", phone_number="12"))
        assert result.error_type is InvalidUser
        assert set(result.reasons) == {"invalid email address", "invalid phone number"}
