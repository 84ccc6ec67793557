# tests/test_csv_import.py
import pytest
from marketplace.csv_import import RecordMapper, parse_chairs, parse_estates, read_rows
from marketplace.errors import InvalidPayload

ESTATE_ROW = "7,name,desc,/t.png,addr,35.5,139.25,80000,200,90,\"南向き,角部屋\",1234"
CHAIR_ROW = "3,name,desc,/t.png,4500,100,60,55,黒,肘掛け,座椅子,321,2"


def test_record_mapper_reads_in_order():
    rm = RecordMapper(["1", "2.5", "x"])
    assert rm.next_int() == 1
    assert rm.next_float() == 2.5
    assert rm.next_string() == "x"
    assert rm.err() is None


def test_record_mapper_first_error_sticks():
    rm = RecordMapper(["abc", "2"])
    assert rm.next_int() == 0
    assert rm.next_int() == 0
    assert isinstance(rm.err(), ValueError)


def test_record_mapper_too_many_reads():
    rm = RecordMapper(["1"])
    rm.next_int()
    assert rm.next_string() == ""
    assert "too many read" in str(rm.err())


def test_parse_estates():
    (estate,) = parse_estates(read_rows(ESTATE_ROW.encode("utf-8")))
    assert estate.id == 7
    assert estate.latitude == 35.5
    assert estate.door_height == 200
    assert estate.door_width == 90
    assert estate.features == "南向き,角部屋"
    assert estate.popularity == 1234


def test_parse_chairs():
    (chair,) = parse_chairs(read_rows(CHAIR_ROW + "\n"))
    assert (chair.id, chair.price, chair.kind, chair.stock) == (3, 4500, "座椅子", 2)


def test_short_row_is_rejected():
    with pytest.raises(InvalidPayload, match="record 2"):
        parse_chairs(read_rows(CHAIR_ROW + "\n1,too,short\n"))


def test_non_utf8_upload_is_rejected():
    with pytest.raises(InvalidPayload):
        read_rows(b"\xff\xfe\x00bad")
