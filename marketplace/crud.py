# marketplace/crud.py
"""Relational store operations for `Estate` and `Chair`.

Every list comes back in the canonical order: popularity descending, ties by
ascending id. Search predicates arrive as `conditions.Predicate` descriptors
and are turned into SQLAlchemy expressions here.
"""
from sqlalchemy import select, delete, update, and_, or_, func
from sqlalchemy.orm import Session
from typing import List, Sequence, Tuple

from .conditions import Predicate, GE, LT, EQ, CONTAINS
from .errors import NotFound
from .geometry import BoundingBox, polygon_contains
from .models import Chair, Estate

LIMIT = 20

def _expression(model, predicate: Predicate):
    column = getattr(model, predicate.attribute)
    if predicate.operator == GE:
        return column >= predicate.value
    if predicate.operator == LT:
        return column < predicate.value
    if predicate.operator == EQ:
        return column == predicate.value
    if predicate.operator == CONTAINS:
        # token goes in unescaped
        return column.like("%" + predicate.value + "%")
    raise ValueError("unknown operator %r" % predicate.operator)

def _where(model, predicates: Sequence[Predicate]):
    return and_(*[_expression(model, p) for p in predicates])

def _canonical(model):
    return (model.popularity.desc(), model.id.asc())

def search(db: Session, model, predicates: Sequence[Predicate], limit: int, offset: int) -> Tuple[list, int]:
    where = _where(model, predicates)
    total = db.scalar(select(func.count()).select_from(model).where(where))
    items = db.scalars(
        select(model).where(where).order_by(*_canonical(model)).limit(limit).offset(offset)
    ).all()
    return list(items), int(total or 0)

def search_ids(db: Session, model, predicates: Sequence[Predicate]) -> List[int]:
    return list(db.scalars(select(model.id).where(_where(model, predicates)).order_by(*_canonical(model))).all())

def get_estates_by_ids(db: Session, ids: Sequence[int]) -> List[Estate]:
    if not ids:
        return []
    return list(db.scalars(select(Estate).where(Estate.id.in_(list(ids)))).all())

def get_estate(db: Session, estate_id: int) -> Estate:
    obj = db.get(Estate, estate_id)
    if obj is None:
        raise NotFound("estate %s not found" % estate_id)
    return obj

def get_chair(db: Session, chair_id: int) -> Chair:
    obj = db.get(Chair, chair_id)
    if obj is None:
        raise NotFound("chair %s not found" % chair_id)
    if obj.stock <= 0:
        raise NotFound("chair %s is sold out" % chair_id)
    return obj

def low_priced_chairs(db: Session, limit: int = LIMIT) -> List[Chair]:
    return list(db.scalars(select(Chair).order_by(Chair.price.asc(), Chair.id.asc()).limit(limit)).all())

def low_priced_estates(db: Session, limit: int = LIMIT) -> List[Estate]:
    return list(db.scalars(select(Estate).order_by(Estate.rent.asc(), Estate.id.asc()).limit(limit)).all())

def estates_fitting(db: Session, a: int, b: int, limit: int = LIMIT) -> List[Estate]:
    """Estates whose door takes an a x b object either way round."""
    fits = or_(
        and_(Estate.door_width >= a, Estate.door_height >= b),
        and_(Estate.door_width >= b, Estate.door_height >= a),
    )
    return list(db.scalars(select(Estate).where(fits).order_by(*_canonical(Estate)).limit(limit)).all())

def estates_in_box(db: Session, box: BoundingBox) -> List[Estate]:
    stmt = (
        select(Estate)
        .where(
            Estate.latitude <= box.max_latitude,
            Estate.latitude >= box.min_latitude,
            Estate.longitude <= box.max_longitude,
            Estate.longitude >= box.min_longitude,
        )
        .order_by(*_canonical(Estate))
    )
    return list(db.scalars(stmt).all())

def estate_in_polygon(db: Session, estate_id: int, polygon: str) -> bool:
    stmt = select(Estate.id).where(
        Estate.id == estate_id,
        polygon_contains(polygon, Estate.latitude, Estate.longitude),
    )
    return db.scalar(stmt) is not None

def buy_chair(db: Session, chair_id: int) -> None:
    """Take one unit of stock; the last unit deletes the row.

    Runs as one transaction with the row locked, so concurrent buyers of the
    last unit see exactly one success.
    """
    try:
        chair = db.scalar(
            select(Chair).where(Chair.id == chair_id, Chair.stock > 0).with_for_update()
        )
        if chair is None:
            raise NotFound("chair %s not found" % chair_id)
        result = db.execute(
            update(Chair)
            .where(Chair.id == chair_id, Chair.stock > 0)
            .values(stock=Chair.stock - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFound("chair %s sold out" % chair_id)
        db.execute(
            delete(Chair)
            .where(Chair.id == chair_id, Chair.stock <= 0)
            .execution_options(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

def bulk_insert(db: Session, rows: list) -> int:
    try:
        db.add_all(rows)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return len(rows)
