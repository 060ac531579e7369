# backend/tests/conftest.py
"""
Pytest configuration for the marketplace backend.

Every test runs against a fresh in-memory SQLite database built from the
model metadata, so tests never touch a configured database.
"""

import os

# Set testing mode BEFORE any marketplace imports
os.environ["is_testing"] = "true"
os.environ["database_url"] = "sqlite://"
os.environ["notifications_enabled"] = "true"

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Dict, Optional
from unittest.mock import Mock

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from marketplace.api.dependencies.database import get_db
from marketplace.auth import create_access_token
from marketplace.core.config import settings
from marketplace.database import Base, create_db_engine
from marketplace.main import app
from marketplace.models.booking import Booking, BookingItem, BookingStatus
from marketplace.models.provider import Location, Provider, ProviderLocation, ProviderUser
from marketplace.models.service import Service
from marketplace.models.user import User
from marketplace.services.booking_service import BookingService
from marketplace.services.notification_service import NotificationService

settings.is_testing = True

test_engine = create_db_engine("sqlite://")
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)

BASE_START = datetime(2030, 1, 15, 14, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_start() -> datetime:
    """Start of the default booking window (a fixed UTC instant in the future)."""
    return BASE_START


@pytest.fixture(scope="function")
def db():
    """Create a fresh schema and session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db: Session):
    """Create a test client bound to the test session."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


# ============================================================================
# Catalog fixtures
# ============================================================================


@dataclass
class MarketplaceData:
    """One provider with its team, locations, services and a few outsiders."""

    provider: Provider
    other_provider: Provider
    location: Location
    unlinked_location: Location
    owner: User
    manager: User
    staff: User
    former_staff: User
    outsider: User
    customer: User
    other_customer: User
    owner_membership: ProviderUser
    manager_membership: ProviderUser
    staff_membership: ProviderUser
    former_membership: ProviderUser
    haircut: Service
    beard_trim: Service
    inactive_service: Service
    usd_service: Service
    foreign_service: Service


def _user(db: Session, email: str, first_name: str, last_name: str) -> User:
    user = User(email=email, first_name=first_name, last_name=last_name)
    db.add(user)
    return user


def _membership(db: Session, provider: Provider, user: User, **flags) -> ProviderUser:
    membership = ProviderUser(provider_id=provider.id, user_id=user.id, **flags)
    db.add(membership)
    return membership


def _service(
    db: Session, provider: Provider, name: str, price: str, *, currency="JMD", is_active=True
) -> Service:
    service = Service(
        provider_id=provider.id,
        name=name,
        base_price=Decimal(price),
        currency=currency,
        duration=30,
        is_active=is_active,
    )
    db.add(service)
    return service


@pytest.fixture
def marketplace(db: Session) -> MarketplaceData:
    """Seed a barbershop with owner, manager, staff and a priced catalog."""
    provider = Provider(
        business_name="Kingston Cuts",
        slug="kingston-cuts",
        business_phone="+18765551000",
        business_email="hello@kingstoncuts.example",
        logo_url="https://cdn.example.com/kingston-cuts.png",
    )
    other_provider = Provider(business_name="Montego Spa", slug="montego-spa")
    location = Location(
        name="Half Way Tree",
        address="12 Constant Spring Rd",
        city="Kingston",
        parish="St. Andrew",
    )
    unlinked_location = Location(name="Ocho Rios", address="1 Main St", city="Ocho Rios")
    db.add_all([provider, other_provider, location, unlinked_location])
    db.flush()
    db.add(ProviderLocation(provider_id=provider.id, location_id=location.id, is_primary=True))
    db.add(ProviderLocation(provider_id=other_provider.id, location_id=unlinked_location.id))

    owner = _user(db, "owner@kingstoncuts.example", "Olivia", "Owner")
    manager = _user(db, "manager@kingstoncuts.example", "Marcus", "Manager")
    staff = _user(db, "staff@kingstoncuts.example", "Sasha", "Staff")
    former_staff = _user(db, "former@kingstoncuts.example", "Fred", "Former")
    outsider = _user(db, "outsider@example.com", "Oscar", "Outsider")
    customer = _user(db, "customer@example.com", "Carla", "Customer")
    other_customer = _user(db, "other.customer@example.com", "Colin", "Customer")
    db.flush()

    owner_membership = _membership(
        db, provider, owner, is_owner=True, can_manage_bookings=False
    )
    manager_membership = _membership(db, provider, manager, can_manage_bookings=True)
    staff_membership = _membership(db, provider, staff, can_manage_bookings=False)
    former_membership = _membership(db, provider, former_staff, is_active=False)

    haircut = _service(db, provider, "Haircut", "1500.00")
    beard_trim = _service(db, provider, "Beard Trim", "800.00")
    inactive_service = _service(db, provider, "Hot Towel", "500.00", is_active=False)
    usd_service = _service(db, provider, "Tourist Cut", "40.00", currency="USD")
    foreign_service = _service(db, other_provider, "Massage", "6000.00")

    db.commit()

    return MarketplaceData(
        provider=provider,
        other_provider=other_provider,
        location=location,
        unlinked_location=unlinked_location,
        owner=owner,
        manager=manager,
        staff=staff,
        former_staff=former_staff,
        outsider=outsider,
        customer=customer,
        other_customer=other_customer,
        owner_membership=owner_membership,
        manager_membership=manager_membership,
        staff_membership=staff_membership,
        former_membership=former_membership,
        haircut=haircut,
        beard_trim=beard_trim,
        inactive_service=inactive_service,
        usd_service=usd_service,
        foreign_service=foreign_service,
    )


@pytest.fixture
def booking_factory(db: Session, marketplace: MarketplaceData) -> Callable[..., Booking]:
    """Insert a priced booking straight through the ORM."""

    def _create(
        *,
        customer: Optional[User] = None,
        guest_email: Optional[str] = None,
        status: BookingStatus = BookingStatus.PENDING,
        start: Optional[datetime] = None,
        hours: int = 1,
        assigned_to: Optional[User] = None,
        location: Optional[Location] = None,
        provider: Optional[Provider] = None,
    ) -> Booking:
        start_time = start or BASE_START
        booking_provider = provider or marketplace.provider
        if guest_email is None and customer is None:
            customer = marketplace.customer
        booking = Booking(
            customer_id=customer.id if customer else None,
            is_guest_booking=customer is None,
            guest_first_name="Gina" if customer is None else None,
            guest_last_name="Guest" if customer is None else None,
            guest_email=guest_email if customer is None else None,
            provider_id=booking_provider.id,
            location_id=(location or marketplace.location).id,
            assigned_user_id=assigned_to.id if assigned_to else None,
            start_time=start_time,
            end_time=start_time + timedelta(hours=hours),
            subtotal=Decimal("1500.00"),
            tax_amount=Decimal("187.50"),
            total_amount=Decimal("1687.50"),
            currency="JMD",
            status=status.value,
        )
        booking.items.append(
            BookingItem(
                service_id=marketplace.haircut.id,
                position=0,
                quantity=1,
                unit_price=Decimal("1500.00"),
                total=Decimal("1500.00"),
            )
        )
        db.add(booking)
        db.commit()
        return booking

    return _create


# ============================================================================
# Service and auth helpers
# ============================================================================


@pytest.fixture
def mock_notification_service() -> Mock:
    return Mock(spec=NotificationService)


@pytest.fixture
def booking_service(db: Session, mock_notification_service: Mock) -> BookingService:
    return BookingService(db, notification_service=mock_notification_service)


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Bearer headers for any seeded user."""
    return auth_headers_for


def booking_payload(marketplace: MarketplaceData, **overrides) -> Dict[str, object]:
    """camelCase create-booking request body for the seeded provider."""
    payload: Dict[str, object] = {
        "customerId": marketplace.customer.id,
        "providerId": marketplace.provider.id,
        "locationId": marketplace.location.id,
        "startTime": BASE_START.isoformat(),
        "endTime": (BASE_START + timedelta(hours=1)).isoformat(),
        "serviceIds": [marketplace.haircut.id, marketplace.beard_trim.id],
    }
    payload.update(overrides)
    return {key: value for key, value in payload.items() if value is not None}


@pytest.fixture
def payload_for() -> Callable[..., Dict[str, object]]:
    return booking_payload
