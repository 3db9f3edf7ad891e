# tests/test_concurrency.py
"""
Concurrent writers against a file-backed SQLite database.
Each worker gets its own engine connection and session, like separate requests.
"""

import threading

import pytest
from sqlalchemy import func
from sqlalchemy.orm import sessionmaker
from reception.database import build_engine, create_tables
from reception.models.visitor import Visitor
from reception.services import visitor_service
from reception.services.audit_service import AuditEmitter
from reception.services.errors import AlreadyActiveError, CapacityError


@pytest.fixture
def file_db(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'reception.db'}")
    create_tables(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def run_concurrently(session_factory, jobs):
    """Run each job(db) in its own thread, released together. Returns results or raised errors."""
    barrier = threading.Barrier(len(jobs))
    outcomes = [None] * len(jobs)

    def worker(index, job):
        db = session_factory()
        try:
            barrier.wait()
            outcomes[index] = job(db)
        except Exception as e:
            outcomes[index] = e
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i, job)) for i, job in enumerate(jobs)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


class TestConcurrentCapacity:
    def test_two_registers_for_last_seat_only_one_wins(self, file_db, actor):
        audit = AuditEmitter(file_db)
        setup = file_db()
        for cpf in ("11111111111", "22222222222"):
            visitor_service.register_visitor(setup, audit, actor, "Guest", cpf, "Room 2")
        setup.close()

        outcomes = run_concurrently(file_db, [
            lambda db: visitor_service.register_visitor(db, audit, actor, "Ana", "33333333333", "Room 2").id,
            lambda db: visitor_service.register_visitor(db, audit, actor, "Bia", "44444444444", "Room 2").id,
        ])

        winners = [o for o in outcomes if isinstance(o, str)]
        losers = [o for o in outcomes if isinstance(o, CapacityError)]
        assert len(winners) == 1, outcomes
        assert len(losers) == 1, outcomes

        check = file_db()
        active = check.query(func.count(Visitor.id)).filter(
            Visitor.room == "Room 2", Visitor.check_out_at.is_(None)).scalar()
        check.close()
        assert active == 3

    def test_many_registers_never_exceed_cap(self, file_db, actor):
        audit = AuditEmitter(file_db)
        jobs = [
            (lambda cpf: lambda db: visitor_service.register_visitor(db, audit, actor, "Guest", cpf, "Room 3").id)(
                f"{n:011d}")
            for n in range(1, 7)
        ]

        outcomes = run_concurrently(file_db, jobs)

        assert sum(isinstance(o, str) for o in outcomes) == 3, outcomes
        assert sum(isinstance(o, CapacityError) for o in outcomes) == 3, outcomes


class TestConcurrentDuplicateVisit:
    def test_same_profile_checked_in_twice_only_one_wins(self, file_db, actor):
        audit = AuditEmitter(file_db)
        setup = file_db()
        visitor = visitor_service.register_visitor(setup, audit, actor, "Ana", "12345678901", "Room 1")
        visitor_service.check_out_visitor(setup, audit, actor, visitor.id)
        visitor_id = visitor.id
        setup.close()

        outcomes = run_concurrently(file_db, [
            lambda db: visitor_service.check_in_visitor(db, audit, actor, visitor_id).id,
            lambda db: visitor_service.check_in_visitor(db, audit, actor, visitor_id).id,
        ])

        assert sum(isinstance(o, str) for o in outcomes) == 1, outcomes
        assert sum(isinstance(o, AlreadyActiveError) for o in outcomes) == 1, outcomes
