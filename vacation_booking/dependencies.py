"""
FastAPI dependency injection providers.

Route handlers receive the database engine, payment gateway, notifier, pricing
engine and calling actor through these providers. Tests swap any of them with
app.dependency_overrides.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Generator, Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.engine import Engine

from vacation_booking.actors import ANONYMOUS, Actor, ActorRole
from vacation_booking.config import NOTIFICATION_BACKEND, STRIPE_SECRET_KEY
from vacation_booking.db.engine import engine
from vacation_booking.network.notifications import Notifier, build_notifier
from vacation_booking.network.payments import PaymentGateway
from vacation_booking.pricing.engine import PricingEngine
from vacation_booking.pricing.holidays import load_holiday_calendar


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: test_engine
    """
    yield engine


def get_payment_gateway() -> PaymentGateway:
    """Payment gateway configured with the Stripe secret key."""
    return PaymentGateway(stripe_api_key=STRIPE_SECRET_KEY)


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    """Notification backend selected by NOTIFICATION_BACKEND."""
    return build_notifier(NOTIFICATION_BACKEND)


@lru_cache(maxsize=1)
def get_pricing_engine() -> PricingEngine:
    """Pricing engine with the holiday calendar loaded once per process."""
    return PricingEngine(holidays=load_holiday_calendar())


def get_current_actor(
    x_user_id: Optional[int] = Header(None),
    x_user_role: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
) -> Actor:
    """
    Build the calling actor from gateway-provided identity headers.

    Requests without X-User-Id are anonymous guests.

    Raises:
        HTTPException: 400 if X-User-Role is not a known role
    """
    if x_user_id is None:
        if x_user_email:
            return Actor(user_id=None, role=ActorRole.CLIENT, email=x_user_email)
        return ANONYMOUS

    try:
        role = ActorRole(x_user_role or ActorRole.CLIENT.value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown user role: {x_user_role}",
        )
    return Actor(user_id=x_user_id, role=role, email=x_user_email)
