import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session

from parkmap.models.base import Base
from parkmap.settings import DATABASE_URL

logger = logging.getLogger(__name__)

_is_sqlite = DATABASE_URL.startswith("sqlite")
_connect_args = {"check_same_thread": False} if _is_sqlite else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


if _is_sqlite:
    # SQLite は外部キー制約が既定で無効
    @event.listens_for(engine, "connect")
    def _enable_sqlite_fk(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


def _register_models() -> None:
    # 各モデルモジュールを明示 import してメタデータ登録を確実化
    import parkmap.models.district  # noqa: F401
    import parkmap.models.park  # noqa: F401
    import parkmap.models.facility  # noqa: F401


def init_db() -> None:
    _register_models()
    if _is_sqlite:
        from parkmap.settings import DATA_DIR
        DATA_DIR.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=engine)
    logger.info("database ready (%s)", engine.url.render_as_string(hide_password=True))


def reset_db() -> None:
    """Drop every table and recreate the schema from scratch."""
    _register_models()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
