"""Database session and engine helpers."""

from __future__ import annotations

import os
from typing import Optional

from sqlalchemy import create_engine, event, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from romshelf.db.models import Base, Region, RegionRow, ReleaseType, ReleaseTypeRow


def _build_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("POSTGRES_USER", "romshelf")
    password = os.getenv("POSTGRES_PASSWORD", "romshelf")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    database = os.getenv("POSTGRES_DB", "romshelf")
    return f"postgresql+psycopg://{user}:{password}@{host}:{port}/{database}"


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    engine = create_engine(url, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


DATABASE_URL = _build_database_url()
engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)


def seed_lookup_tables(session: Session) -> None:
    """Insert the fixed region and release type rows that are still missing."""
    existing_regions = set(session.execute(select(RegionRow.id)).scalars())
    for region in Region:
        if region.value not in existing_regions:
            session.add(
                RegionRow(id=region.value, name=region.display_name, abbreviation=region.abbreviation)
            )

    existing_types = set(session.execute(select(ReleaseTypeRow.id)).scalars())
    for release_type in ReleaseType:
        if release_type.value not in existing_types:
            session.add(ReleaseTypeRow(id=release_type.value, name=release_type.display_name))
    session.commit()


def init_db(bind: Optional[Engine] = None) -> None:
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    with Session(bind=bind, future=True) as session:
        seed_lookup_tables(session)
