# backend/parkmap/settings.py
import logging
import os
import secrets
from pathlib import Path

logger = logging.getLogger(__name__)


def _data_dir() -> Path:
    env = os.getenv("PARKMAP_DATA_DIR")
    if env:
        return Path(env)
    container_data = Path("/app/data")
    if container_data.exists():
        return container_data
    # backend/parkmap/settings.py → ../../.. = <repo root>
    return Path(__file__).resolve().parents[2] / "data"


DATA_DIR = _data_dir()
PHOTOS_DIR = DATA_DIR / "photos"

# 1) DATABASE_URL が指定されていれば優先（例: postgresql+psycopg://...）
# 2) それ以外は DATA_DIR 配下の SQLite
DATABASE_URL = os.getenv("DATABASE_URL") or f"sqlite:///{DATA_DIR / 'parkmap.db'}"

# 写真の公開URLのベース（StaticFiles の /data マウントに対応）
PUBLIC_ASSET_URL = os.getenv("PUBLIC_ASSET_URL", "/data").rstrip("/")

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")

SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
if not SESSION_SECRET_KEY:
    SESSION_SECRET_KEY = secrets.token_urlsafe(32)
    logger.warning("SESSION_SECRET_KEY not set; sessions will not survive a restart")

CORS_ALLOW_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
