from datetime import date
from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.engine import Engine

from vacation_booking.actors import Actor
from vacation_booking.dependencies import get_current_actor, get_db_engine, get_pricing_engine
from vacation_booking.errors import BookingError
from vacation_booking.pricing.engine import PricingEngine
from vacation_booking.routes._booking_helpers import raise_http_for
from vacation_booking.schemas.bookings import PriceValidationPayload
from vacation_booking.schemas.listings import AvailabilityCheckPayload, AvailabilityUpdatePayload
from vacation_booking.services.availability import (
    check_availability,
    get_availability_calendar,
    update_availability,
)
from vacation_booking.services.pricing import (
    get_calendar_pricing,
    get_estimate,
    get_quote,
    validate_quoted_price,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/listings/{listing_id}/availability")
def availability_calendar_route(
    listing_id: int,
    start_date: date = Query(..., description="First date (inclusive)"),
    end_date: date = Query(..., description="Last date (exclusive)"),
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Booked ranges and blocked dates of a listing."""
    try:
        return get_availability_calendar(engine, listing_id, start_date, end_date)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("availability_fetch_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/listings/{listing_id}/availability/check")
def availability_check_route(
    listing_id: int,
    payload: AvailabilityCheckPayload,
    engine: Engine = Depends(get_db_engine),
) -> dict[str, Any]:
    """Whether a stay can be booked, with the conflicting bookings and blocked dates."""
    try:
        result = check_availability(
            engine, listing_id, payload.check_in_date, payload.check_out_date
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("availability_check_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"listing_id": listing_id, **result.to_dict()}


@router.put("/listings/{listing_id}/availability")
def availability_update_route(
    listing_id: int,
    payload: AvailabilityUpdatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Block or release calendar dates (owner or admin)."""
    try:
        count = update_availability(
            engine, listing_id, actor, [entry.model_dump() for entry in payload.dates]
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("availability_update_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {"listing_id": listing_id, "updated": count}


@router.get("/listings/{listing_id}/quote")
def quote_route(
    listing_id: int,
    check_in_date: date = Query(...),
    check_out_date: date = Query(...),
    guests_count: int = Query(..., ge=1),
    engine: Engine = Depends(get_db_engine),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
) -> dict[str, Any]:
    """Full price breakdown for a stay."""
    try:
        quote = get_quote(
            engine, pricing_engine, listing_id, check_in_date, check_out_date, guests_count
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("quote_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return {
        "listing_id": listing_id,
        "check_in_date": check_in_date.isoformat(),
        "check_out_date": check_out_date.isoformat(),
        "guests_count": guests_count,
        **quote.to_breakdown(),
    }


@router.get("/listings/{listing_id}/estimate")
def estimate_route(
    listing_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    engine: Engine = Depends(get_db_engine),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
) -> dict[str, Any]:
    """Summary price for two guests, for listing pages."""
    try:
        return get_estimate(engine, pricing_engine, listing_id, start_date, end_date)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("estimate_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/listings/{listing_id}/quote/validate")
def validate_quote_route(
    listing_id: int,
    payload: PriceValidationPayload,
    engine: Engine = Depends(get_db_engine),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
) -> dict[str, Any]:
    """Check a total shown to the guest against the current price."""
    try:
        return validate_quoted_price(
            engine,
            pricing_engine,
            listing_id,
            payload.check_in_date,
            payload.check_out_date,
            payload.guests_count,
            payload.expected_total,
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("quote_validation_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/listings/{listing_id}/calendar-pricing")
def calendar_pricing_route(
    listing_id: int,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    engine: Engine = Depends(get_db_engine),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
) -> dict[str, Any]:
    """Nightly prices and availability for one month."""
    try:
        return get_calendar_pricing(engine, pricing_engine, listing_id, year, month)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("calendar_pricing_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
