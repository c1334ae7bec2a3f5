"""API tests for registration, login lockout and account flows."""

from datetime import timedelta
from unittest.mock import patch

from runners_api.core.database import SessionLocal
from runners_api.core.errors import Conflict
from runners_api.core.timeutil import utcnow
from runners_api.models import User
from runners_api.schemas.auth import RegisterRequest
from runners_api.services import accounts
from support import DEFAULT_PASSWORD, ApiTestCase

REGISTER_URL = "/api/v1/auth/register"
LOGIN_URL = "/api/v1/auth/login"


def _registration(**overrides: object) -> dict:
    body = {
        "email": "a@b.com",
        "password": DEFAULT_PASSWORD,
        "firstName": "A",
        "lastName": "B",
        "role": "user",
    }
    body.update(overrides)
    return body


class TestRegister(ApiTestCase):
    """POST /auth/register."""

    def test_register_returns_token_and_user_without_hash(self) -> None:
        response = self.client.post(REGISTER_URL, json=_registration())
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertTrue(body["token"])
        self.assertEqual(body["tokenType"], "Bearer")
        self.assertEqual(body["user"]["email"], "a@b.com")
        self.assertEqual(body["user"]["role"], "user")
        self.assertNotIn("passwordHash", body["user"])
        self.assertNotIn("password_hash", body["user"])
        self.assertNotIn("emailVerificationToken", body["user"])

    def test_duplicate_email_conflicts_and_keeps_one_row(self) -> None:
        first = self.client.post(REGISTER_URL, json=_registration())
        second = self.client.post(REGISTER_URL, json=_registration(email="A@B.com"))
        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 409)
        self.assertEqual(second.json()["error"]["code"], "USER_EXISTS")
        self.assertEqual(self.count_rows(User), 1)

    def test_unique_index_catches_registration_race(self) -> None:
        self.client.post(REGISTER_URL, json=_registration())
        # The email check misses the row a concurrent request just committed.
        with patch.object(accounts, "find_user_by_email", return_value=None):
            response = self.client.post(REGISTER_URL, json=_registration())
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["code"], "USER_EXISTS")
        self.assertEqual(self.count_rows(User), 1)

    def test_lost_race_leaves_session_clean(self) -> None:
        self.client.post(REGISTER_URL, json=_registration())
        with SessionLocal() as db:
            with patch.object(accounts, "find_user_by_email", return_value=None):
                with self.assertRaises(Conflict):
                    accounts.create_user(db, RegisterRequest(**_registration()))
            self.assertFalse(db.new)
            self.assertEqual(db.query(User).count(), 1)

    def test_weak_password_is_rejected_with_field_details(self) -> None:
        response = self.client.post(REGISTER_URL, json=_registration(password="weakpass"))
        self.assertEqual(response.status_code, 400)
        error = response.json()["error"]
        self.assertEqual(error["code"], "VALIDATION_FAILED")
        self.assertIn("password", error["details"])

    def test_unknown_role_lists_allowed_values(self) -> None:
        response = self.client.post(REGISTER_URL, json=_registration(role="superuser"))
        self.assertEqual(response.status_code, 400)
        message = response.json()["error"]["details"]["role"]
        self.assertIn("Value must be one of", message)
        self.assertIn("admin", message)

    def test_mismatched_confirmation_is_rejected(self) -> None:
        response = self.client.post(REGISTER_URL, json=_registration(confirmPassword="Other1!pw"))
        self.assertEqual(response.status_code, 400)

    def test_admin_registration_requires_token(self) -> None:
        response = self.client.post(REGISTER_URL, json=_registration(role="admin"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.count_rows(User), 0)

    def test_admin_registration_by_non_admin_is_forbidden(self) -> None:
        staff = self.make_user("staff@example.com", role="staff")
        response = self.client.post(REGISTER_URL, json=_registration(role="admin"), headers=self.auth(staff))
        self.assertEqual(response.status_code, 403)

    def test_admin_registration_by_admin_succeeds(self) -> None:
        admin = self.make_user("root@example.com", role="admin")
        response = self.client.post(REGISTER_URL, json=_registration(role="staff"), headers=self.auth(admin))
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["user"]["role"], "staff")


class TestLoginLockout(ApiTestCase):
    """Five wrong passwords lock the account for 30 minutes."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user("lock@example.com")

    def _login(self, password: str):
        return self.client.post(LOGIN_URL, json={"email": "lock@example.com", "password": password})

    def test_successful_login_stamps_last_login(self) -> None:
        response = self._login(DEFAULT_PASSWORD)
        self.assertEqual(response.status_code, 200, response.text)
        self.assertTrue(response.json()["token"])
        self.assertIsNotNone(self.get_row(User, self.user.id).last_login_at)

    def test_unknown_email_is_invalid_credentials(self) -> None:
        response = self.client.post(LOGIN_URL, json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "INVALID_CREDENTIALS")

    def test_wrong_password_increments_counter(self) -> None:
        response = self._login("Wrong1!pw")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "INVALID_CREDENTIALS")
        self.assertEqual(self.get_row(User, self.user.id).failed_login_attempts, 1)

    def test_fifth_failure_locks_and_correct_password_is_refused(self) -> None:
        codes = [self._login("Wrong1!pw").json()["error"]["code"] for _ in range(5)]
        self.assertEqual(codes[:4], ["INVALID_CREDENTIALS"] * 4)
        self.assertEqual(codes[4], "ACCOUNT_LOCKED")

        row = self.get_row(User, self.user.id)
        self.assertEqual(row.failed_login_attempts, 5)
        self.assertIsNotNone(row.locked_until)

        sixth = self._login(DEFAULT_PASSWORD)
        self.assertEqual(sixth.status_code, 401)
        self.assertEqual(sixth.json()["error"]["code"], "ACCOUNT_LOCKED")

    def test_login_succeeds_after_lock_window_and_resets_counter(self) -> None:
        for _ in range(5):
            self._login("Wrong1!pw")
        with SessionLocal() as db:
            row = db.get(User, self.user.id)
            row.locked_until = utcnow() - timedelta(minutes=1)
            db.commit()

        response = self._login(DEFAULT_PASSWORD)
        self.assertEqual(response.status_code, 200, response.text)
        row = self.get_row(User, self.user.id)
        self.assertEqual(row.failed_login_attempts, 0)
        self.assertIsNone(row.locked_until)

    def test_success_before_lock_resets_counter(self) -> None:
        for _ in range(3):
            self._login("Wrong1!pw")
        self.assertEqual(self._login(DEFAULT_PASSWORD).status_code, 200)
        self.assertEqual(self.get_row(User, self.user.id).failed_login_attempts, 0)

    def test_inactive_account_is_refused(self) -> None:
        self.make_user("off@example.com", is_active=False)
        response = self.client.post(LOGIN_URL, json={"email": "off@example.com", "password": DEFAULT_PASSWORD})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "ACCOUNT_DISABLED")


class TestAccount(ApiTestCase):
    """Token-protected account endpoints."""

    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user("me@example.com", phone_number="555-123-4567")

    def test_me_requires_token(self) -> None:
        response = self.client.get("/api/v1/auth/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "UNAUTHORIZED")

    def test_garbage_token_is_rejected(self) -> None:
        response = self.client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["error"]["code"], "INVALID_TOKEN")

    def test_token_of_deactivated_user_is_rejected(self) -> None:
        headers = self.auth(self.user)
        with SessionLocal() as db:
            db.get(User, self.user.id).is_active = False
            db.commit()
        self.assertEqual(self.client.get("/api/v1/auth/me", headers=headers).status_code, 401)

    def test_profile_update_skips_blank_fields(self) -> None:
        response = self.client.put(
            "/api/v1/auth/profile",
            json={"firstName": "Robin", "lastName": "", "phoneNumber": None, "city": "Houston"},
            headers=self.auth(self.user),
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["firstName"], "Robin")
        self.assertEqual(body["lastName"], "Doe")
        self.assertEqual(body["phoneNumber"], "555-123-4567")
        self.assertEqual(body["city"], "Houston")
        self.assertIsNotNone(body["updatedAt"])

    def test_change_password_requires_current_password(self) -> None:
        response = self.client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": "Wrong1!pw", "newPassword": "N3w!passw", "confirmNewPassword": "N3w!passw"},
            headers=self.auth(self.user),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "INVALID_PASSWORD")

    def test_change_password_then_login_with_new_password(self) -> None:
        response = self.client.post(
            "/api/v1/auth/change-password",
            json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "N3w!passw", "confirmNewPassword": "N3w!passw"},
            headers=self.auth(self.user),
        )
        self.assertEqual(response.status_code, 200, response.text)
        login = self.client.post(LOGIN_URL, json={"email": "me@example.com", "password": "N3w!passw"})
        self.assertEqual(login.status_code, 200)

    def test_forgot_password_does_not_reveal_unknown_email(self) -> None:
        response = self.client.post("/api/v1/auth/forgot-password", json={"email": "ghost@example.com"})
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["ok"])

    def test_reset_password_with_issued_token(self) -> None:
        self.client.post("/api/v1/auth/forgot-password", json={"email": "me@example.com"})
        token = self.get_row(User, self.user.id).password_reset_token
        self.assertTrue(token)
        response = self.client.post(
            "/api/v1/auth/reset-password",
            json={"token": token, "newPassword": "R3set!pw1", "confirmNewPassword": "R3set!pw1"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertIsNone(self.get_row(User, self.user.id).password_reset_token)
        login = self.client.post(LOGIN_URL, json={"email": "me@example.com", "password": "R3set!pw1"})
        self.assertEqual(login.status_code, 200)

    def test_reset_password_with_unknown_token(self) -> None:
        response = self.client.post(
            "/api/v1/auth/reset-password",
            json={"token": "nope", "newPassword": "R3set!pw1", "confirmNewPassword": "R3set!pw1"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "INVALID_TOKEN")

    def test_verify_email_with_registration_token(self) -> None:
        self.client.post(REGISTER_URL, json=_registration(email="new@example.com"))
        with SessionLocal() as db:
            token = db.query(User.email_verification_token).filter(User.email == "new@example.com").scalar()
        response = self.client.post("/api/v1/auth/verify-email", json={"token": token})
        self.assertEqual(response.status_code, 200, response.text)
        self.assertTrue(response.json()["isEmailVerified"])
        self.assertIsNotNone(response.json()["emailVerifiedAt"])
