"""Status and type enumerations shared across the domain"""

from enum import Enum


class UserRole(str, Enum):
    CLIENT = "client"
    PENDING_APPLICATION = "pending_application"
    PENDING_CLEANER = "pending_cleaner"
    REJECTED_CLEANER = "rejected_cleaner"
    CLEANER = "cleaner"
    COMPANY_ADMIN = "company_admin"
    GLOBAL_ADMIN = "global_admin"


class CleanerTier(str, Enum):
    NEW = "new"
    STANDARD = "standard"
    PREMIUM = "premium"
    PRO = "pro"


class CleanerSearchOrder(str, Enum):
    RATING = "rating"  # best rated first
    RATE = "rate"  # cheapest first
    EXPERIENCE = "experience"  # most completed jobs first
    NEWEST = "newest"


class CompanyType(str, Enum):
    INDIVIDUAL = "individual"  # solo operator
    BUSINESS = "business"  # managed by a company admin, may invite cleaners


class ServiceType(str, Enum):
    GENERAL = "general"
    DEEP = "deep"
    MOVE_IN_OUT = "move_in_out"


class ServiceFrequency(str, Enum):
    ONE_TIME = "one_time"
    WEEKLY = "weekly"
    BI_MONTHLY = "bi_monthly"  # 2 times per month
    MONTHLY = "monthly"


class ServiceAddOn(str, Enum):
    OVEN = "oven"
    WINDOWS = "windows"
    FRIDGE = "fridge"
    GARAGE = "garage"


class AvailabilityType(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class RecurrencePattern(str, Enum):
    NONE = "none"
    WEEKLY = "weekly"


class BookingStatus(str, Enum):
    PENDING = "pending"  # awaiting cleaner confirmation
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"  # customer was not present


TERMINAL_BOOKING_STATUSES = frozenset(
    {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value, BookingStatus.NO_SHOW.value}
)

# Bookings that occupy a cleaner's calendar for matching purposes
BLOCKING_BOOKING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.IN_PROGRESS.value)

UPCOMING_BOOKING_STATUSES = (
    BookingStatus.PENDING.value,
    BookingStatus.CONFIRMED.value,
    BookingStatus.IN_PROGRESS.value,
)


class CancellationReason(str, Enum):
    CUSTOMER_REQUEST = "customer_request"
    CLEANER_REQUEST = "cleaner_request"
    EMERGENCY = "emergency"
    WEATHER = "weather"
    OTHER = "other"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FLAGGED = "flagged"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


class PayoutStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"


class ApplicationType(str, Enum):
    CLEANER = "cleaner"
    COMPANY_ADMIN = "company_admin"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CleanerInviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"


# Hourly rate bounds per tier, inclusive, in bani (1 RON = 100 bani)
TIER_RATE_RANGES = {
    CleanerTier.NEW: (4000, 5000),
    CleanerTier.STANDARD: (5000, 7000),
    CleanerTier.PREMIUM: (7000, 10000),
    CleanerTier.PRO: (10000, 15000),
}


def min_rate(tier) -> int:
    """Minimum hourly rate for a tier (bani)"""
    return TIER_RATE_RANGES[CleanerTier(tier)][0]


def max_rate(tier) -> int:
    """Maximum hourly rate for a tier (bani)"""
    return TIER_RATE_RANGES[CleanerTier(tier)][1]


def is_rate_valid_for_tier(rate: int, tier) -> bool:
    return min_rate(tier) <= rate <= max_rate(tier)


def clamp_rate_to_tier(rate: int, tier) -> int:
    return max(min_rate(tier), min(rate, max_rate(tier)))
