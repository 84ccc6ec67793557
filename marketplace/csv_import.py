# marketplace/csv_import.py
"""Positional CSV decoding for bulk listing import.

Columns follow the table layout (see `models.py`). `RecordMapper` walks one
row; the first failure sticks and every later read returns a zero value, so a
row is decoded in one pass and checked once at the end.
"""
import csv
import io
from typing import IO, Iterable, List, Optional, Union

from .errors import InvalidPayload
from .models import Chair, Estate


class RecordMapper:
    def __init__(self, record: List[str]):
        self.record = record
        self._offset = 0
        self._err: Optional[Exception] = None

    def _next(self) -> Optional[str]:
        if self._err is not None:
            return None
        if self._offset >= len(self.record):
            self._err = ValueError("too many read")
            return None
        value = self.record[self._offset]
        self._offset += 1
        return value

    def next_int(self) -> int:
        s = self._next()
        if s is None:
            return 0
        try:
            return int(s)
        except ValueError as e:
            self._err = e
            return 0

    def next_float(self) -> float:
        s = self._next()
        if s is None:
            return 0.0
        try:
            return float(s)
        except ValueError as e:
            self._err = e
            return 0.0

    def next_string(self) -> str:
        s = self._next()
        return "" if s is None else s

    def err(self) -> Optional[Exception]:
        return self._err


def read_rows(upload: Union[bytes, str, IO]) -> List[List[str]]:
    if isinstance(upload, bytes):
        try:
            upload = upload.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InvalidPayload("csv is not utf-8: %s" % e)
    if isinstance(upload, str):
        upload = io.StringIO(upload)
    try:
        return [row for row in csv.reader(upload) if row]
    except csv.Error as e:
        raise InvalidPayload("failed to read csv: %s" % e)


def parse_chairs(rows: Iterable[List[str]]) -> List[Chair]:
    chairs = []
    for lineno, row in enumerate(rows, start=1):
        rm = RecordMapper(row)
        chair = Chair(
            id=rm.next_int(),
            name=rm.next_string(),
            description=rm.next_string(),
            thumbnail=rm.next_string(),
            price=rm.next_int(),
            height=rm.next_int(),
            width=rm.next_int(),
            depth=rm.next_int(),
            color=rm.next_string(),
            features=rm.next_string(),
            kind=rm.next_string(),
            popularity=rm.next_int(),
            stock=rm.next_int(),
        )
        if rm.err() is not None:
            raise InvalidPayload("failed to read chair record %d: %s" % (lineno, rm.err()))
        chairs.append(chair)
    return chairs


def parse_estates(rows: Iterable[List[str]]) -> List[Estate]:
    estates = []
    for lineno, row in enumerate(rows, start=1):
        rm = RecordMapper(row)
        estate = Estate(
            id=rm.next_int(),
            name=rm.next_string(),
            description=rm.next_string(),
            thumbnail=rm.next_string(),
            address=rm.next_string(),
            latitude=rm.next_float(),
            longitude=rm.next_float(),
            rent=rm.next_int(),
            door_height=rm.next_int(),
            door_width=rm.next_int(),
            features=rm.next_string(),
            popularity=rm.next_int(),
        )
        if rm.err() is not None:
            raise InvalidPayload("failed to read estate record %d: %s" % (lineno, rm.err()))
        estates.append(estate)
    return estates
