# backend/ostsee/db.py
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from ostsee.config import get_settings
from ostsee.logging_config import get_logger

# Base shared with the model modules so metadata stays in one place
from ostsee.models.base import Base

logger = get_logger(__name__)

# 1) DATABASE_URL wins (e.g. postgresql+psycopg://...)
# 2) otherwise sqlite under DATA_DIR
_settings = get_settings()
SQLALCHEMY_DATABASE_URL = _settings.sqlalchemy_url
_is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")
if _is_sqlite and not _settings.database_url:
    _settings.data_dir.mkdir(parents=True, exist_ok=True)

_connect_args = {"check_same_thread": False} if _is_sqlite else {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args,
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# columns added after the first release; sqlite DBs get them via ALTER TABLE
_LATE_COLUMNS = {
    "sichtungen": {
        "behoerden_informiert": "BOOLEAN NOT NULL DEFAULT 0",
        "aufnahme_einverstaendnis": "BOOLEAN NOT NULL DEFAULT 0",
    },
    "sichtungen_dateien": {
        "url": "VARCHAR(500)",
        "exif_data": "TEXT",
    },
}


def init_db(bind=None) -> None:
    bind = bind or engine
    # import every model module so its table is registered on Base.metadata
    import ostsee.models.sighting  # noqa: F401
    import ostsee.models.sighting_file  # noqa: F401
    Base.metadata.create_all(bind=bind)

    if bind.dialect.name != "sqlite":
        return
    try:
        with bind.begin() as conn:
            for table, columns in _LATE_COLUMNS.items():
                rows = conn.exec_driver_sql(f"PRAGMA table_info({table})").fetchall()
                present = {row[1] for row in rows}
                for name, ddl in columns.items():
                    if name not in present:
                        conn.exec_driver_sql(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}")
                        logger.info("Added column %s.%s", table, name)
    except SQLAlchemyError as exc:
        # startup continues with the existing schema
        logger.warning("sqlite column migration failed: %s", exc)


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
