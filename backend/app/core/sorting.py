"""Shared sorting utilities for repository list queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from app.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The mapped model class.
        order_by: Sort string in "field:direction" format (e.g. "email:asc").
            Unknown columns fall back to the default ordering.
        default_field: Default column to sort by.
        default_direction: Default sort direction ("asc" or "desc").

    Returns:
        The query with ordering applied; ``id`` breaks ties so pages are stable.
    """
    field = default_field
    direction = default_direction

    if order_by:
        candidate_field, _, candidate_direction = order_by.partition(":")
        # Only real table columns are sortable, never relationships or properties
        if candidate_field in model.__table__.columns:
            field = candidate_field
            if not candidate_direction:
                direction = "asc"
            elif candidate_direction in ("asc", "desc"):
                direction = candidate_direction

    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(getattr(model, field)), model.id)
