"""
Price engine

Pure integer arithmetic in bani. Float products (hours x rate x multiplier,
subtotal x percentage) are truncated toward zero, which for the non-negative
amounts involved is the same as flooring.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ...errors import InvariantViolation

# Travel-fee match specificity, higher wins
MATCH_POSTAL_CODE = 3
MATCH_NEIGHBORHOOD = 2
MATCH_CITY_WIDE = 1


@dataclass(frozen=True)
class PriceBreakdown:
    cleaner_hourly_rate: int
    service_price: int
    add_ons_price: int
    travel_fee: int
    platform_fee: int
    total_price: int
    cleaner_payout: int
    estimated_hours: float

    @property
    def subtotal(self) -> int:
        return self.service_price + self.add_ons_price + self.travel_fee


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a and b) and a.strip().casefold() == b.strip().casefold()


def area_match_rank(area, city: str, neighborhood: Optional[str], postal_code: Optional[str]) -> int:
    """How specifically a service area covers a location; 0 means it does not"""
    if not _same(area.city, city):
        return 0
    if _same(area.postal_code, postal_code):
        return MATCH_POSTAL_CODE
    if _same(area.neighborhood, neighborhood):
        return MATCH_NEIGHBORHOOD
    if not area.postal_code and not area.neighborhood:
        return MATCH_CITY_WIDE
    return 0


def resolve_service_area(
    areas: Sequence, city: str, neighborhood: Optional[str] = None, postal_code: Optional[str] = None
):
    """
    Pick the service area that applies to a location.

    The most specific match wins (postal code, then neighborhood, then a
    city-wide area declaring neither); among equally specific matches the
    first declared area wins. Returns None when no area covers the location.
    """
    best, best_rank = None, 0
    for area in areas:
        rank = area_match_rank(area, city, neighborhood, postal_code)
        if rank > best_rank:
            best, best_rank = area, rank
    return best


def resolve_travel_fee(
    areas: Sequence, city: str, neighborhood: Optional[str] = None, postal_code: Optional[str] = None
) -> int:
    area = resolve_service_area(areas, city, neighborhood, postal_code)
    return area.travel_fee if area else 0


def calculate_platform_fee(subtotal: int, platform_fee_percentage: float) -> int:
    return math.floor(subtotal * platform_fee_percentage / 100.0)


def cleaner_payout_for(subtotal: int, platform_fee: int) -> int:
    """The platform fee is deducted from what the cleaner receives"""
    return subtotal - platform_fee


def calculate_price(
    cleaner_profile,
    service_definition,
    add_on_catalog: Iterable,
    requested_add_ons: Iterable[str],
    travel_fee: int,
    platform_fee_percentage: float,
) -> PriceBreakdown:
    """
    Compute the full price breakdown for one cleaning.

    Requested add-ons missing from the active catalog are ignored. Raises
    InvariantViolation when the cleaner or the service is inactive.
    """
    if not cleaner_profile.is_active:
        raise InvariantViolation("cleaner is not currently accepting bookings")
    if not service_definition.is_active:
        raise InvariantViolation("service is not currently available")

    hourly_rate = cleaner_profile.hourly_rate
    service_price = math.floor(hourly_rate * service_definition.base_hours * service_definition.price_multiplier)

    active_add_ons = {d.add_on: d for d in add_on_catalog if d.is_active}
    add_ons_price = 0
    add_on_hours = 0.0
    for add_on in requested_add_ons:
        definition = active_add_ons.get(getattr(add_on, "value", add_on))
        if definition:
            add_ons_price += definition.price
            add_on_hours += definition.estimated_hours

    subtotal = service_price + add_ons_price + travel_fee
    platform_fee = calculate_platform_fee(subtotal, platform_fee_percentage)

    return PriceBreakdown(
        cleaner_hourly_rate=hourly_rate,
        service_price=service_price,
        add_ons_price=add_ons_price,
        travel_fee=travel_fee,
        platform_fee=platform_fee,
        total_price=subtotal + platform_fee,
        cleaner_payout=cleaner_payout_for(subtotal, platform_fee),
        estimated_hours=service_definition.base_hours + add_on_hours,
    )
