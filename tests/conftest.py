"""
Shared test configuration and fixtures.

Environment variables are set before any vacation_booking import so config.py
and the engine singleton point at a throwaway SQLite database. Set
TEST_DATABASE_URL to run the suite against PostgreSQL instead.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

_DB_DIR = tempfile.mkdtemp(prefix="vacation-booking-tests-")
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL") or (
    f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
)
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["NOTIFICATION_BACKEND"] = "log"

from datetime import date, datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Any, Callable, Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402

import vacation_booking.models.bookings  # noqa: E402,F401
import vacation_booking.models.listings  # noqa: E402,F401
import vacation_booking.models.reviews  # noqa: E402,F401
from vacation_booking.db.engine import engine  # noqa: E402
from vacation_booking.db.writers.listings import insert_listing, upsert_pricing_rule  # noqa: E402
from vacation_booking.models.base import Base  # noqa: E402

OWNER_ID = 900
GUEST_ID = 501
ADMIN_ID = 1


@pytest.fixture(scope="session", autouse=True)
def create_schema() -> Generator[None, None, None]:
    """Create all tables once for the test session."""
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clean_tables() -> Generator[None, None, None]:
    """Empty every table after each test."""
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(delete(table))


@pytest.fixture
def listing_factory() -> Callable[..., int]:
    """
    Create a verified listing in Toronto with a 100.00/night pricing rule.

    Keyword arguments override listing columns; ``pricing`` overrides the
    pricing rule. The listing is two years old so no new-listing discount applies.
    """

    def create(pricing: dict[str, Any] | None = None, **overrides: Any) -> int:
        data = {
            "owner_id": OWNER_ID,
            "owner_email": "owner@example.com",
            "name": "Casa Azul",
            "capacity": 4,
            "city": "Toronto",
            "country": "Canada",
            "is_active": True,
            "verification_status": "verified",
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            **overrides,
        }
        with engine.begin() as conn:
            listing_id = insert_listing(conn, data)
            upsert_pricing_rule(
                conn,
                listing_id,
                {
                    "base_price": Decimal("100.00"),
                    "cleaning_fee": Decimal("50.00"),
                    **(pricing or {}),
                },
            )
        return listing_id

    return create


@pytest.fixture
def stay_dates() -> tuple[date, date]:
    """
    A Monday-to-Wednesday stay 10 to 16 days from today.

    Two weekday nights, too far out for the last-minute discount and too close
    for the early-bird discount.
    """
    check_in = date.today() + timedelta(days=10)
    check_in += timedelta(days=(7 - check_in.weekday()) % 7)
    return check_in, check_in + timedelta(days=2)


@pytest.fixture
def guest_headers() -> dict[str, str]:
    return {
        "X-User-Id": str(GUEST_ID),
        "X-User-Role": "client",
        "X-User-Email": "guest@example.com",
    }


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return {"X-User-Id": str(OWNER_ID), "X-User-Role": "property_owner"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-User-Id": str(ADMIN_ID), "X-User-Role": "admin"}


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    API test client with an empty holiday calendar.

    Without holidays and with a single listing in the city (so the low-demand
    0.9 multiplier applies), a weekday night of a 100.00 listing costs 90.00.
    """
    from vacation_booking.dependencies import get_pricing_engine
    from vacation_booking.main import app
    from vacation_booking.pricing.engine import PricingEngine
    from vacation_booking.pricing.holidays import HolidayCalendar

    app.dependency_overrides[get_pricing_engine] = lambda: PricingEngine(
        holidays=HolidayCalendar()
    )
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
