from __future__ import annotations

import pytest

from cleanbuddy.enums import (
    BookingStatus,
    CleanerTier,
    TERMINAL_BOOKING_STATUSES,
    UserRole,
    clamp_rate_to_tier,
    is_rate_valid_for_tier,
    max_rate,
    min_rate,
)
from cleanbuddy.models import User


@pytest.mark.parametrize(
    ("tier", "low", "high"),
    [
        (CleanerTier.NEW, 4000, 5000),
        (CleanerTier.STANDARD, 5000, 7000),
        (CleanerTier.PREMIUM, 7000, 10000),
        (CleanerTier.PRO, 10000, 15000),
    ],
)
def test_tier_rate_ranges(tier: CleanerTier, low: int, high: int) -> None:
    assert min_rate(tier) == low
    assert max_rate(tier) == high
    assert min_rate(tier.value) == low


def test_rate_bounds_are_inclusive() -> None:
    assert is_rate_valid_for_tier(4000, CleanerTier.NEW)
    assert is_rate_valid_for_tier(5000, CleanerTier.NEW)
    assert not is_rate_valid_for_tier(3999, CleanerTier.NEW)
    assert not is_rate_valid_for_tier(5001, CleanerTier.NEW)


def test_clamp_rate_into_tier_range() -> None:
    assert clamp_rate_to_tier(4500, CleanerTier.PREMIUM) == 7000
    assert clamp_rate_to_tier(20000, CleanerTier.PRO) == 15000
    assert clamp_rate_to_tier(6000, CleanerTier.STANDARD) == 6000


def test_terminal_statuses() -> None:
    assert TERMINAL_BOOKING_STATUSES == {"completed", "cancelled", "no_show"}
    for status in (BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS):
        assert status.value not in TERMINAL_BOOKING_STATUSES


PREDICATES = {
    UserRole.CLIENT: "is_client",
    UserRole.PENDING_APPLICATION: "is_pending_application",
    UserRole.PENDING_CLEANER: "is_pending_cleaner",
    UserRole.REJECTED_CLEANER: "is_rejected_cleaner",
    UserRole.CLEANER: "is_cleaner",
    UserRole.COMPANY_ADMIN: "is_company_admin",
    UserRole.GLOBAL_ADMIN: "is_global_admin",
}


@pytest.mark.parametrize("role", list(UserRole))
def test_exactly_one_role_predicate_holds(role: UserRole) -> None:
    user = User(email="someone@example.com", role=role.value)
    matching = [name for name in PREDICATES.values() if getattr(user, name)()]
    assert matching == [PREDICATES[role]]


def test_full_name_skips_missing_parts() -> None:
    assert User(email="a@example.com", first_name="Ana", last_name=None).full_name == "Ana"
    assert User(email="a@example.com").full_name == ""
