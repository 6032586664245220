"""Tests for driveeasy.core.database helpers and the session purge job."""

import unittest
from contextlib import nullcontext
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock, patch

from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from driveeasy import purge_sessions
from driveeasy.core import database
from driveeasy.models import Base, User, UserSession


def _make_db() -> Session:
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)()


class TestCheckDbConnected(unittest.TestCase):
    def test_reachable(self) -> None:
        db = _make_db()
        self.addCleanup(db.close)
        self.assertTrue(database.check_db_connected(db))

    def test_unreachable_rolls_back(self) -> None:
        db = MagicMock()
        db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        self.assertFalse(database.check_db_connected(db))
        db.rollback.assert_called_once()


class TestSessionScope(unittest.TestCase):
    def test_closes_on_error(self) -> None:
        fake = MagicMock()
        with patch.object(database, "SessionLocal", return_value=fake):
            with self.assertRaises(RuntimeError):
                with database.session_scope() as db:
                    self.assertIs(db, fake)
                    raise RuntimeError("job failed")
        fake.close.assert_called_once()


class TestPurgeSessionsJob(unittest.TestCase):
    def setUp(self) -> None:
        self.db = _make_db()
        user = User(name="Asha", email="asha@example.com", password_hash="x", role="user")
        self.db.add(user)
        self.db.flush()
        now = datetime.now(UTC)
        for sid, expires_at in (
            ("old-1", now - timedelta(hours=2)),
            ("old-2", now - timedelta(minutes=1)),
            ("live", now + timedelta(hours=20)),
        ):
            self.db.add(
                UserSession(
                    id=sid,
                    user_id=user.id,
                    role="user",
                    name="Asha",
                    email="asha@example.com",
                    expires_at=expires_at,
                )
            )
        self.db.commit()

    def tearDown(self) -> None:
        self.db.close()

    def test_removes_only_expired_rows(self) -> None:
        with patch.object(purge_sessions, "session_scope", return_value=nullcontext(self.db)):
            self.assertEqual(purge_sessions.main(), 0)
        self.assertEqual([s.id for s in self.db.query(UserSession).all()], ["live"])

    def test_store_failure_exits_nonzero(self) -> None:
        broken = MagicMock()
        broken.query.side_effect = OperationalError("DELETE", {}, Exception("read-only"))
        with patch.object(purge_sessions, "session_scope", return_value=nullcontext(broken)):
            self.assertEqual(purge_sessions.main(), 1)
        broken.rollback.assert_called_once()
