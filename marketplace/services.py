# marketplace/services.py
from pathlib import Path
from sqlalchemy.orm import Session
from typing import List, Sequence, Tuple

from . import crud
from .cache import EstateIdCache
from .csv_import import parse_chairs, parse_estates, read_rows
from .db import Base
from .errors import InvalidPayload
from .geometry import bounding_box, polygon_text
from .models import Chair, Estate
from .schemas import Coordinate
from .utils import logger

NAZOTTE_LIMIT = 50


def import_chairs(db: Session, upload) -> int:
    chairs = parse_chairs(read_rows(upload))
    count = crud.bulk_insert(db, chairs)
    logger.info("Imported %d chairs", count)
    return count


def import_estates(db: Session, upload, cache: EstateIdCache) -> int:
    estates = parse_estates(read_rows(upload))
    count = crud.bulk_insert(db, estates)
    logger.info("Imported %d estates", count)
    # new estates change search results
    cache.invalidate_all()
    return count


def initialize(db: Session, cache: EstateIdCache, fixture_dir: Path) -> None:
    """Reset the store to the seed data in `fixture_dir`."""
    cache.invalidate_all()
    engine = db.get_bind()
    db.close()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    fixture_dir = Path(fixture_dir)
    for name, parse in (("estate.csv", parse_estates), ("chair.csv", parse_chairs)):
        path = fixture_dir / name
        if not path.exists():
            logger.warning("Seed file %s missing, table left empty", path)
            continue
        with open(path, "r", encoding="utf-8", newline="") as fh:
            rows = parse(read_rows(fh))
        crud.bulk_insert(db, rows)
        logger.info("Seeded %d rows from %s", len(rows), path)


def search_estates_in_polygon(db: Session, coordinates: Sequence[Coordinate]) -> Tuple[List[Estate], int]:
    """Estates inside the polygon, canonical order, at most NAZOTTE_LIMIT.

    The bounding box query narrows the candidates on indexed columns; each
    candidate is then confirmed with the exact containment test.
    """
    if not coordinates:
        raise InvalidPayload("coordinates must not be empty")
    candidates = crud.estates_in_box(db, bounding_box(coordinates))
    polygon = polygon_text(coordinates)
    matched = []
    for estate in candidates:
        if crud.estate_in_polygon(db, estate.id, polygon):
            matched.append(estate)
            if len(matched) == NAZOTTE_LIMIT:
                break
    return matched, len(matched)


def two_smallest(dimensions: Sequence[int]) -> Tuple[int, int]:
    a, b = sorted(dimensions)[:2]
    return a, b


def recommended_estates(db: Session, dimensions: Sequence[int], limit: int = crud.LIMIT) -> List[Estate]:
    a, b = two_smallest(dimensions)
    return crud.estates_fitting(db, a, b, limit=limit)


def recommended_estates_for_chair(db: Session, chair_id: int) -> List[Estate]:
    chair = db.get(Chair, chair_id)
    if chair is None:
        raise InvalidPayload("chair %s not found" % chair_id)
    return recommended_estates(db, (chair.width, chair.height, chair.depth))


def request_estate_document(db: Session, estate_id: int) -> Estate:
    estate = crud.get_estate(db, estate_id)
    logger.info("Document requested for estate %s", estate_id)
    return estate


def buy_chair(db: Session, chair_id: int) -> None:
    crud.buy_chair(db, chair_id)
    logger.info("Chair %s purchased", chair_id)
