import httpx
import pytest

from parkmap.mapstate.client import ApiError, ParkMapClient
from parkmap.mapstate.store import EntityStore
from parkmap.schemas.district import DistrictOut
from parkmap.schemas.facility import FacilityOut
from parkmap.schemas.park import ParkOut


def mock_client(handler) -> ParkMapClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
    return ParkMapClient(http)


async def test_failed_list_stays_empty(square):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/districts":
            return httpx.Response(200, json=[{"id": 1, "name": "D", "geometry": square(0, 0)}])
        if request.url.path == "/parks":
            return httpx.Response(500, json={"detail": "Failed to fetch parks"})
        raise httpx.ConnectError("connection refused", request=request)

    store = EntityStore()
    await store.load(mock_client(handler))

    assert [d.name for d in store.districts] == ["D"]
    assert store.parks == []
    assert store.facilities == []


async def test_malformed_payload_is_treated_as_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/facilities":
            return httpx.Response(200, json=[{"name": "no id"}])
        return httpx.Response(200, json=[])

    store = EntityStore()
    await store.load(mock_client(handler))
    assert store.facilities == []


async def test_client_surfaces_server_detail():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"detail": "District with this name already exists"})

    with pytest.raises(ApiError) as exc_info:
        await mock_client(handler).create_district({"name": "x"})
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "District with this name already exists"


async def test_client_falls_back_to_generic_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(ApiError) as exc_info:
        await mock_client(handler).delete_park(1)
    assert exc_info.value.message == "Request failed (502)"


def make_store(square) -> EntityStore:
    store = EntityStore()
    store.districts = [DistrictOut(id=1, name="D", geometry=square(0, 0, 1))]
    store.parks = [
        ParkOut(id=10, name="A", geometry=square(0.1, 0.1), district_id=1),
        ParkOut(id=20, name="B", geometry=square(0.5, 0.5), district_id=1),
    ]
    store.facilities = [
        FacilityOut(id=1, name="a1", type="NTO", latitude=0.105, longitude=0.105, park_id=10),
        FacilityOut(id=2, name="a2", type="NTO", latitude=0.106, longitude=0.106, park_id=10),
        FacilityOut(id=3, name="b1", type="NTO", latitude=0.505, longitude=0.505, park_id=20),
    ]
    return store


def test_remove_park_cascades_to_its_facilities(square):
    store = make_store(square)
    store.remove_park(10)
    assert [p.id for p in store.parks] == [20]
    assert [f.id for f in store.facilities] == [3]


def test_remove_district_keeps_parks(square):
    store = make_store(square)
    store.remove_district(1)
    assert store.districts == []
    assert [p.id for p in store.parks] == [10, 20]
    assert len(store.facilities) == 3


def test_put_replaces_by_id(square):
    store = make_store(square)
    store.put_park(ParkOut(id=20, name="B2", geometry=square(0.5, 0.5)))
    store.put_park(ParkOut(id=30, name="C", geometry=square(0.7, 0.7)))
    assert [(p.id, p.name) for p in store.parks] == [(10, "A"), (20, "B2"), (30, "C")]
    assert store.park(20).district_id is None
    assert store.park(None) is None
