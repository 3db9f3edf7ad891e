# tests/conftest.py
"""Shared fixtures: in-memory SQLite store, audit emitter, operators and an API client."""

import os
import sys
import tempfile

# Settings are read at import time, so point them at SQLite before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "reception-test-logs"))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reception.database import Base, create_tables, get_db
from reception.dependencies import get_audit
from reception.main import app
from reception.models.visitor import Visitor
from reception.services.audit_service import AuditEmitter
from reception.services.auth_service import issue_token, sign_up
from reception.services.context import Identity
from reception.utils.timeutils import utcnow


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def audit(session_factory):
    return AuditEmitter(session_factory)


@pytest.fixture
def actor():
    return Identity(actor_id="op-1", name="Front Desk", cpf="98765432100", email="desk@example.com")


@pytest.fixture
def make_visitor(db):
    """Insert a visitor row directly, bypassing the lifecycle rules."""
    def _make(name="Ana", cpf="12345678901", room="Room 1", checked_out=False,
              check_in_at=None, check_out_at=None, **extra):
        check_in_at = check_in_at or utcnow()
        if checked_out and check_out_at is None:
            check_out_at = check_in_at + timedelta(minutes=30)
        visitor = Visitor(name=name, cpf=cpf, room=room, check_in_at=check_in_at,
                          check_out_at=check_out_at, created_at=check_in_at, **extra)
        db.add(visitor)
        db.commit()
        db.refresh(visitor)
        return visitor
    return _make


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_audit] = lambda: AuditEmitter(session_factory)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def operator(db, audit):
    operator, _ = sign_up(db, audit, "desk@example.com", "secret123", name="Front Desk")
    return operator


@pytest.fixture
def auth_headers(operator):
    return {"Authorization": f"Bearer {issue_token(operator.id, operator.email)}"}
