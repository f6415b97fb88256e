import os
import tempfile
from io import BytesIO

# parkmap.settings は import 時に環境変数を読むので先に設定する
_TMP = tempfile.mkdtemp(prefix="parkmap-test-")
os.environ["PARKMAP_DATA_DIR"] = _TMP
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "secret"
os.environ["SESSION_SECRET_KEY"] = "test-secret"
os.environ["PUBLIC_ASSET_URL"] = "/data"

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from parkmap.db import reset_db
from parkmap.main import app
from parkmap.mapstate.client import ParkMapClient

ADMIN = {"username": "admin", "password": "secret"}


def make_square(lng: float, lat: float, size: float = 0.01) -> dict:
    return {
        "type": "Polygon",
        "coordinates": [[
            [lng, lat],
            [lng + size, lat],
            [lng + size, lat + size],
            [lng, lat + size],
            [lng, lat],
        ]],
    }


@pytest.fixture
def square():
    return make_square


@pytest.fixture
def png_bytes() -> bytes:
    buf = BytesIO()
    Image.new("RGB", (4, 4), color=(0, 128, 0)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def fresh_db():
    reset_db()
    yield


@pytest.fixture
def client(fresh_db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_client(client):
    r = client.post("/auth/login", json=ADMIN)
    assert r.status_code == 200
    return client


@pytest.fixture
async def api(fresh_db):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield ParkMapClient(http)


@pytest.fixture
async def admin_api(api):
    assert await api.login(ADMIN["username"], ADMIN["password"])
    return api
