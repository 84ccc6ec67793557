# tests/test_api.py
import pytest
import redis
from marketplace import crud
from marketplace.models import Chair

from factories import make_chair, make_estate


@pytest.fixture
def seeded(session_factory):
    with session_factory() as session:
        crud.bulk_insert(session, [
            make_estate(1, rent=60000, door_width=90, door_height=120, features="角部屋", popularity=50,
                        latitude=1, longitude=1),
            make_estate(2, rent=70000, door_width=160, door_height=200, features="南向き,角部屋", popularity=90,
                        latitude=3, longitude=3),
            make_estate(3, rent=30000, door_width=70, door_height=70, popularity=90),
            make_chair(1, price=2000, kind="座椅子", color="黒", stock=1, width=5, height=10, depth=7),
            make_chair(2, price=13000, kind="ゲーミングチェア", color="白", stock=3),
        ])


def test_search_conditions_are_served(client, catalog):
    body = client.get("/listings/estate/search/condition").json()
    assert set(body) == {"doorWidth", "doorHeight", "rent", "feature"}
    assert len(body["rent"]["ranges"]) == len(catalog.estate.rent.ranges)
    assert "kind" in client.get("/listings/chair/search/condition").json()


def test_estate_search_through_cache(client, seeded, fill_recorder):
    params = {"rentRangeId": "1", "page": 0, "perPage": 10}
    cold = client.get("/listings/estate/search", params=params)
    assert cold.status_code == 200
    warm = client.get("/listings/estate/search", params=params)
    assert cold.json() == warm.json()
    body = warm.json()
    assert body["count"] == 2
    assert [e["id"] for e in body["estates"]] == [2, 1]
    assert "doorHeight" in body["estates"][0]
    assert "popularity" not in body["estates"][0]
    assert fill_recorder.fills == [("__1_", [2, 1])]


def test_estate_import_invalidates_cache(client, seeded, fill_recorder):
    params = {"features": "角部屋", "page": 0, "perPage": 10}
    assert client.get("/listings/estate/search", params=params).json()["count"] == 2
    csv_row = "9,new,desc,/t.png,addr,5.0,5.0,50000,100,100,角部屋,999\n"
    resp = client.post("/listings/estate", files={"estates": ("estate.csv", csv_row.encode("utf-8"), "text/csv")})
    assert resp.status_code == 201
    body = client.get("/listings/estate/search", params=params).json()
    assert body["count"] == 3
    assert body["estates"][0]["id"] == 9
    assert len(fill_recorder.fills) == 2


@pytest.mark.parametrize("params", [
    {"page": 0, "perPage": 10},
    {"rentRangeId": "99", "page": 0, "perPage": 10},
    {"rentRangeId": "1", "page": "x", "perPage": 10},
    {"rentRangeId": "1", "page": 0},
    {"rentRangeId": "1", "page": -1, "perPage": 10},
    {"rentRangeId": "1", "page": 10 ** 19, "perPage": 10},
    {"rentRangeId": "1", "page": 2 ** 62, "perPage": 4},
    {"rentRangeId": "1", "page": 0, "perPage": 2 ** 63},
])
def test_estate_search_rejects_bad_requests(client, params):
    assert client.get("/listings/estate/search", params=params).status_code == 400


def test_estate_search_reports_cache_outage(client, seeded, redis_client, monkeypatch):
    def down(*args, **kwargs):
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(redis_client, "llen", down)
    resp = client.get("/listings/estate/search", params={"rentRangeId": "1", "page": 0, "perPage": 10})
    assert resp.status_code == 500


def test_chair_search(client, seeded):
    resp = client.get("/listings/chair/search", params={"kind": "座椅子", "page": 0, "perPage": 5})
    assert resp.status_code == 200
    assert resp.json()["count"] == 1
    assert resp.json()["chairs"][0]["id"] == 1
    assert "stock" not in resp.json()["chairs"][0]
    assert client.get("/listings/chair/search", params={"page": 0, "perPage": 5}).status_code == 400
    huge = {"kind": "座椅子", "page": 10 ** 19, "perPage": 10}
    assert client.get("/listings/chair/search", params=huge).status_code == 400
    last = {"kind": "座椅子", "page": 0, "perPage": 2 ** 63 - 1}
    assert client.get("/listings/chair/search", params=last).json()["count"] == 1


def test_details(client, seeded):
    assert client.get("/listings/estate/2").json()["doorWidth"] == 160
    assert client.get("/listings/estate/404").status_code == 404
    assert client.get("/listings/chair/2").json()["kind"] == "ゲーミングチェア"
    assert client.get("/listings/chair/404").status_code == 404
    assert client.get("/listings/chair/abc").status_code == 400


def test_buy_last_chair(client, seeded, session_factory):
    assert client.post("/listings/chair/buy/1", json={"email": "a@example.com"}).status_code == 200
    assert client.post("/listings/chair/buy/1", json={"email": "a@example.com"}).status_code == 404
    assert client.get("/listings/chair/1").status_code == 404
    assert client.post("/listings/chair/buy/2", json={}).status_code == 400
    with session_factory() as session:
        assert session.get(Chair, 1) is None


def test_nazotte(client, seeded):
    square = [{"latitude": 0, "longitude": 0}, {"latitude": 0, "longitude": 2},
              {"latitude": 2, "longitude": 2}, {"latitude": 2, "longitude": 0}]
    body = client.post("/listings/estate/nazotte", json={"coordinates": square}).json()
    assert body["count"] == 1
    assert body["estates"][0]["id"] == 1
    assert client.post("/listings/estate/nazotte", json={"coordinates": []}).status_code == 400


def test_low_priced_and_recommended(client, seeded):
    assert [e["id"] for e in client.get("/listings/estate/low_priced").json()["estates"]] == [3, 1, 2]
    assert [c["id"] for c in client.get("/listings/chair/low_priced").json()["chairs"]] == [1, 2]
    recommended = client.get("/listings/recommended_estate/1").json()["estates"]
    assert [e["id"] for e in recommended] == [2, 3, 1]
    assert client.get("/listings/recommended_estate/404").status_code == 400


def test_request_document(client, seeded):
    assert client.post("/listings/estate/req_doc/1", json={"email": "a@example.com"}).status_code == 200
    assert client.post("/listings/estate/req_doc/404", json={"email": "a@example.com"}).status_code == 404
    assert client.post("/listings/estate/req_doc/1", json={}).status_code == 400


def test_chair_import_rejects_bad_rows(client):
    resp = client.post("/listings/chair", files={"chairs": ("chair.csv", b"1,only,three\n", "text/csv")})
    assert resp.status_code == 400


def test_initialize_loads_seed_data(client, seeded, redis_client):
    client.get("/listings/estate/search", params={"rentRangeId": "1", "page": 0, "perPage": 10})
    assert redis_client.keys("estate:ids:*")
    resp = client.post("/initialize")
    assert resp.status_code == 200
    assert resp.json() == {"language": "python"}
    assert redis_client.keys("estate:ids:*") == []
    assert client.get("/listings/estate/1").json()["name"] == "海の見えるワンルーム"
    assert client.get("/listings/chair/search", params={"kind": "座椅子", "page": 0, "perPage": 10}).json()["count"] == 2
