# marketplace/ranges.py
"""Range catalog: the static search conditions offered to clients.

Loaded once at startup from `chair_condition.json` and
`estate_condition.json`; read-only afterwards.
"""
import json
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidRangeIndex
from .schemas import ChairSearchCondition, EstateSearchCondition, Range, RangeCondition

UNBOUNDED = -1

_INDEX_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class RangeCatalog:
    chair: ChairSearchCondition
    estate: EstateSearchCondition

    @classmethod
    def load(cls, fixture_dir: Path) -> "RangeCatalog":
        fixture_dir = Path(fixture_dir)
        with open(fixture_dir / "chair_condition.json", "r", encoding="utf-8") as fh:
            chair = ChairSearchCondition.model_validate(json.load(fh))
        with open(fixture_dir / "estate_condition.json", "r", encoding="utf-8") as fh:
            estate = EstateSearchCondition.model_validate(json.load(fh))
        return cls(chair=chair, estate=estate)


def get_range(condition: RangeCondition, range_id: str) -> Range:
    """Select a bucket by its positional index given as a raw string."""
    # int() alone would also accept "1_0" and surrounding whitespace
    if not isinstance(range_id, str) or not _INDEX_RE.fullmatch(range_id):
        raise InvalidRangeIndex("range id %r is not an integer" % (range_id,))
    index = int(range_id)
    if index < 0 or index >= len(condition.ranges):
        raise InvalidRangeIndex("unexpected range id %r" % (range_id,))
    return condition.ranges[index]
