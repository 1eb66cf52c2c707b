"""Database engine and session management."""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from core.settings import get_settings
from core.models import Base
from modules.auth import service as auth_service
from modules.products import models as product_models  # noqa: F401
from modules.purchases import models as purchase_models  # noqa: F401
from modules.raw_materials import models as raw_material_models  # noqa: F401
from modules.transactions import models as transaction_models  # noqa: F401

logger = logging.getLogger(__name__)

settings = get_settings()

_is_sqlite = settings.database_url_normalized.startswith("sqlite")

engine = create_engine(
    settings.database_url_normalized,
    connect_args={"check_same_thread": False} if _is_sqlite else {},
    pool_pre_ping=not _is_sqlite,
)

if _is_sqlite:

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    # Seed the first admin so a fresh install can log in (idempotent)
    session = SessionLocal()
    try:
        auth_service.ensure_bootstrap_admin(session, get_settings())
    finally:
        session.close()
