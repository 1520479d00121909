"""
Dialect-aware upsert helpers with IS DISTINCT FROM optimization.

PostgreSQL and SQLite both support INSERT ... ON CONFLICT; the statement is
built with the matching dialect's insert() so the same writer runs in
production and in the test database.
"""

from typing import Any

from sqlalchemy import or_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection


def _dialect_insert(conn: Connection, table: Any) -> Any:
    dialect = conn.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table)
    if dialect == "sqlite":
        return sqlite.insert(table)
    raise NotImplementedError(f"Upsert is not supported on {dialect}")


def upsert_with_distinct_check(
    conn: Connection,
    table: type,
    rows: list[dict[str, Any]],
    conflict_columns: list[str],
    distinct_columns: list[str],
    update_columns: list[str] | None = None,
) -> None:
    """
    Perform upsert with IS DISTINCT FROM optimization.

    Only updates rows where at least one of distinct_columns actually changed,
    so no-op writes leave updated_at untouched.

    Args:
        conn: Active database connection (within transaction)
        table: SQLAlchemy ORM table class (e.g., AvailabilityBlock)
        rows: List of row dicts to upsert
        conflict_columns: Columns of the unique constraint used for ON CONFLICT
        distinct_columns: Columns compared to decide whether to update
        update_columns: Columns to update on conflict (default: distinct_columns + "updated_at")

    Example:
        >>> with engine.begin() as conn:
        ...     upsert_with_distinct_check(
        ...         conn=conn,
        ...         table=AvailabilityBlock,
        ...         rows=[{"listing_id": 1, "date": date(2026, 5, 1), "is_available": False}],
        ...         conflict_columns=["listing_id", "date"],
        ...         distinct_columns=["is_available", "blocked_reason"],
        ...     )
    """
    if not rows:
        return

    if update_columns is None:
        update_columns = [*distinct_columns, "updated_at"]

    stmt = _dialect_insert(conn, table).values(rows)

    set_dict = {col: getattr(stmt.excluded, col) for col in update_columns}

    distinct_check = or_(
        *[
            getattr(table, col).is_distinct_from(getattr(stmt.excluded, col))
            for col in distinct_columns
        ]
    )

    stmt = stmt.on_conflict_do_update(
        index_elements=conflict_columns,
        set_=set_dict,
        where=distinct_check,
    )

    conn.execute(stmt)


def insert_if_absent(
    conn: Connection,
    table: type,
    row: dict[str, Any],
    conflict_columns: list[str],
) -> bool:
    """
    Insert a row unless one with the same conflict key exists.

    Returns:
        bool: True if the row was inserted, False if it already existed
    """
    stmt = (
        _dialect_insert(conn, table)
        .values(row)
        .on_conflict_do_nothing(index_elements=conflict_columns)
    )
    result = conn.execute(stmt)
    return bool(result.rowcount)
