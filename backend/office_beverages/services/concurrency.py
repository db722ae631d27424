# Overview: Row locking and compare-and-set helpers for order and stock writes.

from __future__ import annotations

from sqlalchemy import case, update

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    SQLite serializes writers on its own.
    """
    return query.with_for_update()


def compare_and_set(model, row_id: int, *, expected: dict, values: dict) -> bool:
    """
    UPDATE model SET values WHERE id = row_id AND <expected columns match>.

    Returns True only if exactly this call changed the row, so two racing
    callers cannot both see the expected state. Does not commit.
    """
    stmt = update(model).where(model.id == row_id)
    for column_name, value in expected.items():
        stmt = stmt.where(getattr(model, column_name) == value)
    stmt = stmt.values(**values).execution_options(synchronize_session=False)

    result = db.session.execute(stmt)
    return result.rowcount == 1


def clamped_add(column, delta: int):
    """SQL expression for column + delta, floored at zero."""
    return case((column + delta < 0, 0), else_=column + delta)
