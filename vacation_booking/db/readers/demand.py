"""Area occupancy snapshots used for demand pricing."""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from vacation_booking.models.bookings import Booking
from vacation_booking.models.listings import Listing

listings = Listing.__table__
bookings = Booking.__table__


def count_active_listings(conn: Connection, city: str) -> int:
    """
    Count active listings in a city.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        city (str): City name.

    Returns:
        int: Number of active listings.
    """
    stmt = (
        select(func.count())
        .select_from(listings)
        .where(listings.c.city == city)
        .where(listings.c.is_active.is_(True))
    )
    return int(conn.execute(stmt).scalar_one())


def get_confirmed_ranges(
    conn: Connection, city: str, start: date, end: date
) -> list[tuple[date, date]]:
    """
    Fetch (check_in, check_out) of confirmed bookings in a city overlapping [start, end).

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        city (str): City name.
        start (date): First night of the window.
        end (date): End of the window (exclusive).

    Returns:
        list[tuple[date, date]]: Booked ranges, half-open.
    """
    stmt = (
        select(bookings.c.check_in_date, bookings.c.check_out_date)
        .join(listings, listings.c.id == bookings.c.listing_id)
        .where(listings.c.city == city)
        .where(bookings.c.booking_status == "confirmed")
        .where(bookings.c.check_in_date < end)
        .where(bookings.c.check_out_date > start)
    )
    return [(row.check_in_date, row.check_out_date) for row in conn.execute(stmt)]
