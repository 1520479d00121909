"""
SQLAlchemy engine singleton with production-ready connection pooling.

This module creates a single engine instance with connection pooling configured
for concurrent booking requests. SQLite URLs (used by the test suite) get the
driver's default pool and are shared across the request thread pool.
"""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url

from vacation_booking.config import DATABASE_URL

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set.")


def _engine_options(url: str) -> dict[str, Any]:
    if make_url(url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 10,  # Number of connections to maintain in the pool
        "max_overflow": 20,  # Additional connections when pool is exhausted
        "pool_pre_ping": True,  # Verify connections before using (detect stale connections)
        "pool_recycle": 3600,  # Recycle connections after 1 hour
    }


engine: Engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=False,
    **_engine_options(DATABASE_URL),
)


def check_engine_health() -> bool:
    """
    Check if database engine is healthy and connections are working.

    This function is used by the /ready endpoint to verify database
    connectivity before allowing traffic to the service.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
