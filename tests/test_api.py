"""HTTP flow tests: cookie sessions, role gates, booking lifecycle and the JSON error shape.

The database dependency is swapped for an in-memory SQLite engine.
"""

import unittest
from collections.abc import Generator
from datetime import date, timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from driveeasy.api.auth import get_memory_session_store
from driveeasy.core.config import Settings, get_settings
from driveeasy.core.database import get_db
from driveeasy.main import app
from driveeasy.models import Base, Instructor, User, UserSession
from driveeasy.services.sessions import DatabaseSessionStore, SessionStoreError

COOKIE = "driveeasy.sid"
PASSWORD = "secret123"


def _future(days: int = 7) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


class ApiTestCase(unittest.TestCase):
    settings = Settings(_env_file=None, BCRYPT_ROUNDS=4)

    def setUp(self) -> None:
        engine = create_engine(
            "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
        Base.metadata.create_all(engine)
        self.SessionTesting = sessionmaker(bind=engine, autocommit=False, autoflush=False)

        def override_get_db() -> Generator[Session, None, None]:
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_settings] = lambda: self.settings
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def register(self, email: str, role: str = "user", name: str = "Asha Rao") -> int:
        resp = self.client.post(
            "/register", json={"name": name, "email": email, "password": PASSWORD, "role": role}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["userId"]

    def login(self, email: str, client: TestClient | None = None) -> dict:
        client = client or self.client
        resp = client.post("/login", json={"email": email, "password": PASSWORD})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def book(self, client: TestClient | None = None, **overrides: object):
        body = {
            "studentName": "Asha Rao",
            "phone": "9876543210",
            "address": "12 MG Road",
            "startDate": _future(),
            "timeSlot": "09:00-10:00",
            "licenseType": "LMV",
        }
        body.update(overrides)
        return (client or self.client).post("/bookings", json=body)


class TestAuthFlow(ApiTestCase):
    def test_register_response(self) -> None:
        resp = self.client.post(
            "/register",
            json={"name": "Asha", "email": "asha@example.com", "password": PASSWORD, "role": "user"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Registration successful! Please login.")
        self.assertIsInstance(resp.json()["userId"], int)

    def test_register_validation_error_shape(self) -> None:
        resp = self.client.post(
            "/register", json={"name": "Asha", "email": "bad", "password": PASSWORD, "role": "user"}
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Invalid email format"})

    def test_overlong_name_is_400(self) -> None:
        resp = self.client.post(
            "/register",
            json={"name": "A" * 300, "email": "asha@example.com", "password": PASSWORD, "role": "user"},
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Name must be at most 100 characters"})

    def test_register_instructor_creates_listing(self) -> None:
        user_id = self.register("ravi@example.com", role="instructor", name="Ravi Kumar")
        listing = self.client.get("/instructors").json()
        self.assertEqual(len(listing), 1)
        self.assertEqual(listing[0]["license_id"], f"LIC{user_id:04d}")
        self.assertEqual(listing[0]["status"], "available")
        one = self.client.get(f"/instructors/{listing[0]['id']}")
        self.assertEqual(one.json()["name"], "Ravi Kumar")
        self.assertEqual(self.client.get("/instructors/999").status_code, 404)

    def test_login_sets_cookie_and_check_session_reports_it(self) -> None:
        user_id = self.register("asha@example.com")
        self.assertEqual(self.client.get("/check-session").json(), {"loggedIn": False})
        body = self.login("ASHA@example.com")
        self.assertEqual(
            body,
            {
                "message": "Login successful",
                "role": "user",
                "name": "Asha Rao",
                "email": "asha@example.com",
                "userId": user_id,
            },
        )
        self.assertTrue(self.client.cookies.get(COOKIE))
        status = self.client.get("/check-session").json()
        self.assertEqual(status["loggedIn"], True)
        self.assertEqual(status["role"], "user")
        self.assertEqual(status["userId"], user_id)

    def test_cookie_is_http_only_with_24h_max_age(self) -> None:
        self.register("asha@example.com")
        resp = self.client.post("/login", json={"email": "asha@example.com", "password": PASSWORD})
        header = resp.headers["set-cookie"].lower()
        self.assertIn(f"{COOKIE}=", header)
        self.assertIn("httponly", header)
        self.assertIn("max-age=86400", header)

    def test_wrong_password_is_401(self) -> None:
        self.register("asha@example.com")
        resp = self.client.post("/login", json={"email": "asha@example.com", "password": "nope-nope"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"error": "Invalid email or password"})
        self.assertIsNone(self.client.cookies.get(COOKIE))

    def test_login_regenerates_session_id(self) -> None:
        self.register("asha@example.com")
        resp = self.client.post(
            "/login",
            json={"email": "asha@example.com", "password": PASSWORD},
            headers={"cookie": f"{COOKIE}=planted-by-attacker"},
        )
        self.assertEqual(resp.status_code, 200)
        first = self.client.cookies.get(COOKIE)
        self.assertNotEqual(first, "planted-by-attacker")
        self.login("asha@example.com")
        second = self.client.cookies.get(COOKIE)
        self.assertNotEqual(first, second)
        with self.SessionTesting() as db:
            self.assertIsNone(db.get(UserSession, first))
            self.assertIsNotNone(db.get(UserSession, second))

    def test_logout_clears_session(self) -> None:
        self.register("asha@example.com")
        self.login("asha@example.com")
        sid = self.client.cookies.get(COOKIE)
        resp = self.client.post("/logout")
        self.assertEqual(resp.json(), {"message": "Logged out successfully"})
        self.assertIsNone(self.client.cookies.get(COOKIE))
        self.assertEqual(self.client.get("/check-session").json(), {"loggedIn": False})
        # Replaying the old cookie does not help either.
        resp = self.client.get("/my-bookings", headers={"cookie": f"{COOKIE}={sid}"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(
            resp.json(),
            {"error": "Authentication required", "message": "Please login to access this resource"},
        )

    def test_memory_session_backend(self) -> None:
        self.settings = Settings(_env_file=None, BCRYPT_ROUNDS=4, SESSION_BACKEND="memory")
        get_memory_session_store.cache_clear()
        self.register("asha@example.com")
        self.login("asha@example.com")
        self.assertTrue(self.client.get("/check-session").json()["loggedIn"])
        with self.SessionTesting() as db:
            self.assertEqual(db.query(UserSession).count(), 0)
        self.assertEqual(len(get_memory_session_store()), 1)
        get_memory_session_store.cache_clear()


class TestRoleGates(ApiTestCase):
    def test_anonymous_gets_401_everywhere(self) -> None:
        for method, path in (
            ("get", "/my-bookings"),
            ("get", "/notifications"),
            ("put", "/notifications/read-all"),
            ("get", "/stats"),
            ("get", "/admin/bookings"),
            ("get", "/users"),
            ("get", "/instructor/bookings"),
        ):
            with self.subTest(path=path):
                self.assertEqual(getattr(self.client, method)(path).status_code, 401)

    def test_learner_forbidden_from_admin_routes(self) -> None:
        self.register("asha@example.com")
        self.login("asha@example.com")
        resp = self.client.get("/admin/bookings")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"], "Admin access required")
        self.assertEqual(self.client.get("/users").status_code, 403)
        self.assertEqual(self.client.put("/admin/bookings/1", json={"status": "approved"}).status_code, 403)
        resp = self.client.get("/instructor/bookings")
        self.assertEqual(resp.json()["error"], "Instructor access required")

    def test_admin_lists_users_and_stats(self) -> None:
        self.register("asha@example.com")
        self.register("admin@example.com", role="admin", name="Admin")
        self.login("admin@example.com")
        users = self.client.get("/users").json()
        self.assertEqual({u["email"] for u in users}, {"asha@example.com", "admin@example.com"})
        self.assertNotIn("password_hash", users[0])
        stats = self.client.get("/stats").json()
        self.assertEqual(stats["activeLearners"], 1)
        self.assertEqual(stats["classesBooked"], 0)


class TestBookingFlow(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.learner_id = self.register("asha@example.com")
        self.instructor_user_id = self.register("ravi@example.com", role="instructor", name="Ravi Kumar")
        self.register("admin@example.com", role="admin", name="Admin")
        with self.SessionTesting() as db:
            self.instructor_id = (
                db.query(Instructor.id).filter(Instructor.user_id == self.instructor_user_id).scalar()
            )
        self.admin = TestClient(app)
        self.login("admin@example.com", client=self.admin)
        self.login("asha@example.com")

    def test_full_lifecycle(self) -> None:
        resp = self.book()
        self.assertEqual(resp.status_code, 200, resp.text)
        booking_id = resp.json()["bookingId"]
        self.assertEqual(
            resp.json()["message"],
            "Booking submitted successfully! Admin will review and approve shortly.",
        )

        duplicate = self.book(timeSlot="11:00-12:00")
        self.assertEqual(duplicate.status_code, 400)
        self.assertIn("already have an active booking", duplicate.json()["error"])

        no_instructor = self.admin.put(f"/admin/bookings/{booking_id}", json={"status": "approved"})
        self.assertEqual(no_instructor.status_code, 400)
        self.assertEqual(no_instructor.json()["error"], "Instructor must be assigned when approving")

        approved = self.admin.put(
            f"/admin/bookings/{booking_id}",
            json={"status": "approved", "instructor_id": self.instructor_id},
        )
        self.assertEqual(approved.status_code, 200, approved.text)
        self.assertEqual(
            approved.json(),
            {"message": "Booking approved successfully and user has been notified", "bookingId": booking_id},
        )

        mine = self.client.get("/my-bookings").json()
        self.assertEqual(len(mine), 1)
        self.assertEqual(mine[0]["status"], "approved")
        self.assertEqual(mine[0]["instructor_name"], "Ravi Kumar")

        instructor = TestClient(app)
        self.login("ravi@example.com", client=instructor)
        assigned = instructor.get("/instructor/bookings").json()
        self.assertEqual([b["id"] for b in assigned], [booking_id])
        self.assertEqual(assigned[0]["user_email"], "asha@example.com")

        rejected = self.admin.put(f"/admin/bookings/{booking_id}", json={"status": "rejected"})
        self.assertEqual(rejected.status_code, 200)
        admin_view = self.admin.get("/admin/bookings").json()
        self.assertEqual(admin_view[0]["status"], "rejected")
        self.assertEqual(admin_view[0]["instructor_id"], self.instructor_id)

        notes = self.client.get("/notifications").json()
        self.assertEqual([n["type"] for n in notes], ["booking_update", "booking_update", "booking"])
        self.assertTrue(all(not n["is_read"] for n in notes))

        self.assertEqual(self.book().status_code, 200)

    def test_past_date_rejected(self) -> None:
        resp = self.book(startDate=(date.today() - timedelta(days=1)).isoformat())
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Please select a valid future date"})

    def test_overlong_fields_are_400(self) -> None:
        resp = self.book(studentName="A" * 300)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Name must be at most 100 characters"})
        resp = self.book(timeSlot="9" * 300)
        self.assertEqual(resp.json(), {"error": "Please select a valid time slot"})
        resp = self.book(licenseType="L" * 300)
        self.assertEqual(resp.json(), {"error": "Please select a valid license type"})
        self.assertEqual(self.client.get("/my-bookings").json(), [])

    def test_blank_instructor_id_means_none(self) -> None:
        resp = self.book(instructorId="")
        self.assertEqual(resp.status_code, 200, resp.text)
        mine = self.client.get("/my-bookings").json()
        self.assertIsNone(mine[0]["instructor_id"])

    def test_admin_errors(self) -> None:
        self.assertEqual(self.admin.put("/admin/bookings/999", json={"status": "approved"}).status_code, 404)
        booking_id = self.book().json()["bookingId"]
        resp = self.admin.put(f"/admin/bookings/{booking_id}", json={"status": "cancelled"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json(), {"error": "Invalid status"})

    def test_notification_read_flags(self) -> None:
        self.book()
        note_id = self.client.get("/notifications").json()[0]["id"]

        # Someone else's mark-read is a silent no-op.
        self.assertEqual(self.admin.put(f"/notifications/{note_id}/read").status_code, 200)
        self.assertFalse(self.client.get("/notifications").json()[0]["is_read"])

        resp = self.client.put(f"/notifications/{note_id}/read")
        self.assertEqual(resp.json(), {"message": "Notification marked as read"})
        self.assertTrue(self.client.get("/notifications").json()[0]["is_read"])

        for _ in range(2):
            resp = self.client.put("/notifications/read-all")
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json(), {"message": "All notifications marked as read"})

    def test_stale_role_snapshot_until_relogin(self) -> None:
        with self.SessionTesting() as db:
            db.query(User).filter(User.email == "admin@example.com").update({User.role: "user"})
            db.commit()
        self.assertEqual(self.admin.get("/admin/bookings").status_code, 200)
        self.login("admin@example.com", client=self.admin)
        self.assertEqual(self.admin.get("/admin/bookings").status_code, 403)


class TestErrorShape(ApiTestCase):
    def test_unknown_route(self) -> None:
        resp = self.client.get("/nope")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Route not found", "message": "Cannot GET /nope"})

    def test_malformed_body_is_400(self) -> None:
        resp = self.client.post("/login", content="not json", headers={"content-type": "application/json"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid request")

    def test_root_and_health(self) -> None:
        self.assertEqual(self.client.get("/").json()["message"], "DriveEasy API")
        health = self.client.get("/health")
        self.assertEqual(health.status_code, 200)
        self.assertEqual(health.json()["database"], "connected")

    def test_login_store_failure_sets_no_cookie(self) -> None:
        self.register("asha@example.com")
        with patch.object(DatabaseSessionStore, "save", side_effect=SessionStoreError("disk full")):
            resp = self.client.post("/login", json={"email": "asha@example.com", "password": PASSWORD})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Login failed. Please try again."})
        self.assertNotIn("set-cookie", resp.headers)
        self.assertIsNone(self.client.cookies.get(COOKIE))

    def test_logout_store_failure_keeps_cookie(self) -> None:
        self.register("asha@example.com")
        self.login("asha@example.com")
        sid = self.client.cookies.get(COOKIE)
        with patch.object(DatabaseSessionStore, "delete", side_effect=SessionStoreError("disk full")):
            resp = self.client.post("/logout")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"error": "Logout failed"})
        self.assertNotIn("set-cookie", resp.headers)
        self.assertEqual(self.client.cookies.get(COOKIE), sid)
        self.assertTrue(self.client.get("/check-session").json()["loggedIn"])

    def test_database_error_is_masked(self) -> None:
        failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
        for env, debug in (("prod", True), ("dev", False)):
            with self.subTest(env=env, debug=debug):
                settings = Settings(_env_file=None, APP_ENV=env, DEBUG=debug)
                with patch("driveeasy.core.errors.get_settings", return_value=settings), patch(
                    "driveeasy.api.instructors.list_instructors", side_effect=failure
                ):
                    resp = self.client.get("/instructors")
                self.assertEqual(resp.status_code, 500)
                self.assertEqual(
                    resp.json(), {"error": "Internal server error", "message": "Something went wrong"}
                )

    def test_database_error_detail_shown_in_dev_debug(self) -> None:
        failure = OperationalError("SELECT 1", {}, Exception("connection refused"))
        settings = Settings(_env_file=None, APP_ENV="dev", DEBUG=True)
        with patch("driveeasy.core.errors.get_settings", return_value=settings), patch(
            "driveeasy.api.instructors.list_instructors", side_effect=failure
        ):
            resp = self.client.get("/instructors")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["error"], "Internal server error")
        self.assertIn("connection refused", resp.json()["message"])

    def test_unhandled_error_is_masked(self) -> None:
        client = TestClient(app, raise_server_exceptions=False)
        settings = Settings(_env_file=None, APP_ENV="prod")
        with patch("driveeasy.core.errors.get_settings", return_value=settings), patch(
            "driveeasy.api.instructors.list_instructors", side_effect=RuntimeError("boom")
        ):
            resp = client.get("/instructors")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(
            resp.json(), {"error": "Internal server error", "message": "Something went wrong"}
        )
