# marketplace/conditions.py
"""Translate search request parameters into predicate descriptors.

A `Predicate` is storage-agnostic: `crud.py` turns it into a SQLAlchemy
expression. Feature tokens become `features LIKE '%token%'` with the token
inserted verbatim, so `%` and `_` in a token keep their wildcard meaning.
"""
from dataclasses import dataclass
from typing import Any, List

from .errors import NoSearchCondition
from .ranges import UNBOUNDED, RangeCatalog, get_range
from .schemas import RangeCondition

GE = "ge"
LT = "lt"
EQ = "eq"
CONTAINS = "contains"


@dataclass(frozen=True)
class Predicate:
    attribute: str
    operator: str
    value: Any


def range_predicates(attribute: str, condition: RangeCondition, range_id: str) -> List[Predicate]:
    if range_id == "":
        return []
    bucket = get_range(condition, range_id)
    predicates = []
    if bucket.min != UNBOUNDED:
        predicates.append(Predicate(attribute, GE, bucket.min))
    if bucket.max != UNBOUNDED:
        predicates.append(Predicate(attribute, LT, bucket.max))
    return predicates


def feature_predicates(features: str) -> List[Predicate]:
    if features == "":
        return []
    return [Predicate("features", CONTAINS, token) for token in features.split(",")]


def build_estate_predicates(
    catalog: RangeCatalog,
    door_height_range_id: str = "",
    door_width_range_id: str = "",
    rent_range_id: str = "",
    features: str = "",
) -> List[Predicate]:
    cond = catalog.estate
    return (
        range_predicates("door_height", cond.door_height, door_height_range_id)
        + range_predicates("door_width", cond.door_width, door_width_range_id)
        + range_predicates("rent", cond.rent, rent_range_id)
        + feature_predicates(features)
    )


def build_chair_predicates(
    catalog: RangeCatalog,
    price_range_id: str = "",
    height_range_id: str = "",
    width_range_id: str = "",
    depth_range_id: str = "",
    kind: str = "",
    color: str = "",
    features: str = "",
) -> List[Predicate]:
    cond = catalog.chair
    predicates = (
        range_predicates("price", cond.price, price_range_id)
        + range_predicates("height", cond.height, height_range_id)
        + range_predicates("width", cond.width, width_range_id)
        + range_predicates("depth", cond.depth, depth_range_id)
    )
    if kind != "":
        predicates.append(Predicate("kind", EQ, kind))
    if color != "":
        predicates.append(Predicate("color", EQ, color))
    return predicates + feature_predicates(features)


def require_conditions(predicates: List[Predicate]) -> List[Predicate]:
    if not predicates:
        raise NoSearchCondition("search condition not found")
    return predicates


def estate_fingerprint(
    door_height_range_id: str = "",
    door_width_range_id: str = "",
    rent_range_id: str = "",
    features: str = "",
) -> str:
    """Cache key for an estate search; equal keys mean equal queries."""
    return "_".join([door_height_range_id, door_width_range_id, rent_range_id, features])
