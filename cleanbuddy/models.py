import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .enums import (
    ApplicationStatus,
    AvailabilityType,
    BookingStatus,
    CleanerInviteStatus,
    CleanerTier,
    CompanyType,
    PayoutStatus,
    RecurrencePattern,
    ReviewStatus,
    ServiceFrequency,
    TERMINAL_BOOKING_STATUSES,
    TransactionStatus,
    UserRole,
    is_rate_valid_for_tier,
)


def generate_id(prefix: str) -> str:
    """Generate a prefixed opaque identifier, e.g. bkg_3f2a..."""
    return f"{prefix}_{uuid.uuid4().hex}"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("usr"))
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(50), default=UserRole.CLIENT.value, nullable=False, index=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    cleaner_profile = relationship(
        "CleanerProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    applications = relationship(
        "Application",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="Application.user_id",
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part).strip()

    def is_global_admin(self) -> bool:
        return self.role == UserRole.GLOBAL_ADMIN.value

    def is_company_admin(self) -> bool:
        return self.role == UserRole.COMPANY_ADMIN.value

    def is_cleaner(self) -> bool:
        return self.role == UserRole.CLEANER.value

    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT.value

    def is_pending_application(self) -> bool:
        return self.role == UserRole.PENDING_APPLICATION.value

    def is_pending_cleaner(self) -> bool:
        return self.role == UserRole.PENDING_CLEANER.value

    def is_rejected_cleaner(self) -> bool:
        return self.role == UserRole.REJECTED_CLEANER.value


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("addr"))
    user_id = Column(String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    label = Column(String(100), nullable=True)  # e.g. Home, Office
    street_address = Column(String(255), nullable=False)
    apartment = Column(String(50), nullable=True)
    city = Column(String(100), nullable=False)
    county = Column(String(100), nullable=True)
    neighborhood = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), default="Romania", nullable=False)
    additional_info = Column(Text, nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="addresses")


class Company(Base):
    __tablename__ = "companies"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("cmp"))
    admin_user_id = Column(String(50), ForeignKey("users.id"), nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    company_type = Column(String(20), default=CompanyType.BUSINESS.value, nullable=False)
    registration_number = Column(String(100), nullable=True)  # CUI / J number
    tax_id = Column(String(100), nullable=True)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True)
    county = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # Aggregates, only ever changed through atomic increments
    total_cleaners = Column(Integer, default=0, nullable=False)
    active_cleaners = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    cleaners = relationship("CleanerProfile", back_populates="company")


class CleanerProfile(Base):
    __tablename__ = "cleaner_profiles"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("clp"))
    user_id = Column(String(50), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    company_id = Column(String(50), ForeignKey("companies.id"), nullable=True, index=True)
    bio = Column(Text, nullable=True)
    tier = Column(String(20), default=CleanerTier.NEW.value, nullable=False)
    hourly_rate = Column(Integer, nullable=False)  # bani
    is_active = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_available_for_booking = Column(Boolean, default=True, nullable=False)
    # Stats rollups
    total_bookings = Column(Integer, default=0, nullable=False)
    completed_bookings = Column(Integer, default=0, nullable=False)
    cancelled_bookings = Column(Integer, default=0, nullable=False)
    total_reviews = Column(Integer, default=0, nullable=False)
    average_rating = Column(Float, default=0.0, nullable=False)
    total_earnings = Column(Integer, default=0, nullable=False)  # bani
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="cleaner_profile")
    company = relationship("Company", back_populates="cleaners")
    service_areas = relationship(
        "ServiceArea",
        back_populates="cleaner_profile",
        cascade="all, delete-orphan",
        order_by="ServiceArea.created_at",
    )
    availability = relationship("Availability", back_populates="cleaner_profile", cascade="all, delete-orphan")

    def is_rate_valid_for_tier(self) -> bool:
        return is_rate_valid_for_tier(self.hourly_rate, self.tier)


class ServiceArea(Base):
    __tablename__ = "service_areas"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("area"))
    cleaner_profile_id = Column(
        String(50), ForeignKey("cleaner_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    city = Column(String(100), nullable=False, index=True)
    neighborhood = Column(String(100), nullable=True)
    postal_code = Column(String(20), nullable=True, index=True)
    travel_fee = Column(Integer, default=0, nullable=False)  # bani
    is_preferred = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    cleaner_profile = relationship("CleanerProfile", back_populates="service_areas")


class Availability(Base):
    __tablename__ = "availability"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("avl"))
    cleaner_profile_id = Column(
        String(50), ForeignKey("cleaner_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(20), default=AvailabilityType.UNAVAILABLE.value, nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    recurrence = Column(String(20), default=RecurrencePattern.NONE.value, nullable=False)
    recurrence_end_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    cleaner_profile = relationship("CleanerProfile", back_populates="availability")


class ServiceDefinition(Base):
    __tablename__ = "service_definitions"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("svc"))
    service_type = Column(String(30), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_hours = Column(Float, nullable=False)
    price_multiplier = Column(Float, default=1.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ServiceAddOnDefinition(Base):
    __tablename__ = "service_add_on_definitions"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("addon"))
    add_on = Column(String(30), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Integer, nullable=False)  # fixed price in bani
    estimated_hours = Column(Float, default=0.0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("bkg"))
    customer_id = Column(String(50), ForeignKey("users.id"), nullable=False, index=True)
    cleaner_id = Column(String(50), ForeignKey("users.id"), nullable=False, index=True)
    cleaner_profile_id = Column(String(50), ForeignKey("cleaner_profiles.id"), nullable=False, index=True)
    address_id = Column(String(50), ForeignKey("addresses.id"), nullable=False)

    service_type = Column(String(30), nullable=False)
    frequency = Column(String(20), default=ServiceFrequency.ONE_TIME.value, nullable=False)
    add_ons = Column(JSON, default=list, nullable=False)

    scheduled_date = Column(Date, nullable=False, index=True)
    scheduled_time = Column(String(5), nullable=False)  # HH:MM
    duration = Column(Float, nullable=False)  # hours
    area_sqm = Column(Integer, nullable=True)
    estimated_hours = Column(Float, nullable=True)

    # Frozen pricing snapshot (bani), computed once at creation
    cleaner_hourly_rate = Column(Integer, nullable=False)
    service_price = Column(Integer, nullable=False)
    add_ons_price = Column(Integer, default=0, nullable=False)
    travel_fee = Column(Integer, default=0, nullable=False)
    platform_fee = Column(Integer, nullable=False)
    total_price = Column(Integer, nullable=False)
    cleaner_payout = Column(Integer, nullable=False)

    status = Column(String(20), default=BookingStatus.PENDING.value, nullable=False, index=True)
    special_instructions = Column(Text, nullable=True)
    access_instructions = Column(Text, nullable=True)
    customer_notes = Column(Text, nullable=True)
    cleaner_notes = Column(Text, nullable=True)

    cancellation_reason = Column(String(30), nullable=True)
    cancellation_note = Column(Text, nullable=True)
    cancelled_by = Column(String(50), ForeignKey("users.id"), nullable=True)

    # Recurring series; expansion is not implemented
    is_recurring = Column(Boolean, default=False, nullable=False)
    parent_booking_id = Column(String(50), ForeignKey("bookings.id"), nullable=True)
    next_booking_id = Column(String(50), nullable=True)

    # Stored as a persisted shape only, no payment processing
    stripe_payment_intent_id = Column(String(255), nullable=True)

    confirmed_at = Column(DateTime, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("User", foreign_keys=[customer_id])
    cleaner = relationship("User", foreign_keys=[cleaner_id])
    cleaner_profile = relationship("CleanerProfile")
    address = relationship("Address")

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BOOKING_STATUSES


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("rev"))
    booking_id = Column(String(50), ForeignKey("bookings.id"), unique=True, nullable=False)
    customer_id = Column(String(50), ForeignKey("users.id"), nullable=False)
    cleaner_profile_id = Column(String(50), ForeignKey("cleaner_profiles.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5
    quality_rating = Column(Integer, nullable=True)
    punctuality_rating = Column(Integer, nullable=True)
    communication_rating = Column(Integer, nullable=True)
    comment = Column(Text, nullable=True)
    status = Column(String(20), default=ReviewStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("txn"))
    booking_id = Column(String(50), ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)  # bani
    platform_fee = Column(Integer, nullable=False)
    cleaner_payout = Column(Integer, nullable=False)
    currency = Column(String(3), default="RON", nullable=False)
    status = Column(String(20), default=TransactionStatus.PENDING.value, nullable=False)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    payout_batch_id = Column(String(50), ForeignKey("payout_batches.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class PayoutBatch(Base):
    __tablename__ = "payout_batches"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("pay"))
    cleaner_profile_id = Column(String(50), ForeignKey("cleaner_profiles.id"), nullable=False, index=True)
    total_amount = Column(Integer, default=0, nullable=False)  # bani
    status = Column(String(20), default=PayoutStatus.PENDING.value, nullable=False)
    period_start = Column(Date, nullable=True)
    period_end = Column(Date, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Application(Base):
    __tablename__ = "applications"

    id = Column(String(50), primary_key=True, default=lambda: generate_id("app"))
    user_id = Column(String(50), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    application_type = Column(String(30), nullable=False)
    status = Column(String(20), default=ApplicationStatus.PENDING.value, nullable=False, index=True)
    message = Column(Text, nullable=True)
    # companyName, registrationNumber, taxId, companyStreet, companyCity, ...
    company_info = Column(JSON, nullable=True)
    # identityDocumentUrl, businessRegistrationUrl, insuranceCertificateUrl, additionalDocuments
    documents = Column(JSON, nullable=True)
    reviewed_by = Column(String(50), ForeignKey("users.id"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="applications", foreign_keys=[user_id])


class CleanerInvite(Base):
    __tablename__ = "cleaner_invites"
    __table_args__ = (UniqueConstraint("token", name="uq_cleaner_invites_token"),)

    id = Column(String(50), primary_key=True, default=lambda: generate_id("inv"))
    company_id = Column(String(50), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by = Column(String(50), ForeignKey("users.id"), nullable=False)
    email = Column(String(255), nullable=True)  # null for open invites
    token = Column(String(64), nullable=False, index=True)
    message = Column(Text, nullable=True)
    status = Column(String(20), default=CleanerInviteStatus.PENDING.value, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    accepted_by = Column(String(50), ForeignKey("users.id"), nullable=True)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    company = relationship("Company")

    def is_expired(self, now: datetime = None) -> bool:
        return (now or utcnow()) > self.expires_at
