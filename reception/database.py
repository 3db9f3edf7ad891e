# reception/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite for local runs and tests). All models
are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from reception.config import settings


def build_engine(url: str):
    """Create an engine with pool settings suited to the backend behind `url`."""
    if url.startswith("sqlite"):
        # Writers wait on the database lock instead of failing with "database is locked"
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": settings.DB_LOCK_TIMEOUT_SECONDS},
            echo=False,
        )
    return create_engine(
        url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency - yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables, seeds the configured rooms and syncs their capacity
    with settings.ROOM_CAPACITY. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from reception.models.visitor import Visitor          # noqa
    from reception.models.audit_entry import AuditEntry   # noqa
    from reception.models.operator import Operator        # noqa
    from reception.models.room import Room

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = sessionmaker(bind=bind)()
    try:
        existing = {room.id: room for room in db.query(Room).all()}
        for room_id in settings.ROOMS:
            room = existing.get(room_id)
            if room is None:
                db.add(Room(id=room_id, capacity=settings.ROOM_CAPACITY, version=0))
            elif room.capacity != settings.ROOM_CAPACITY:
                room.capacity = settings.ROOM_CAPACITY
        db.commit()
    finally:
        db.close()
