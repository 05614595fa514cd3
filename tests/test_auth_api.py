"""HTTP tests for auth endpoints and the access guard (authenticate, require-verified)."""

import unittest
from datetime import UTC, datetime, timedelta

from app.core.security import TokenCodec
from tests.helpers import TEST_SECRET, ApiTestCase

POST_BODY = {"title": "My first blog post", "content": "Hello world", "status": "published"}


class TestRegistration(ApiTestCase):
    def register(self, username: str = "alice", email: str = "alice@x.com", password: str = "Passw0rd"):
        return self.client.post(
            self.url("/auth/register"),
            json={"username": username, "email": email, "password": password},
        )

    def test_register_returns_envelope_without_password_hash(self) -> None:
        r = self.register()
        self.assertEqual(r.status_code, 201, r.text)
        body = r.json()
        self.assertTrue(body["success"])
        self.assertIn("message", body)
        user = body["data"]["user"]
        self.assertEqual(user["username"], "alice")
        self.assertFalse(user["is_verified"])
        self.assertNotIn("password_hash", user)
        self.assertNotIn("password", user)
        self.mailer.send_verification_email.assert_called_once()

    def test_email_is_normalized(self) -> None:
        r = self.register(email="  Alice@X.com ")
        self.assertEqual(r.json()["data"]["user"]["email"], "alice@x.com")

    def test_duplicate_email_and_username_conflict(self) -> None:
        self.assertEqual(self.register().status_code, 201)
        r = self.register(username="alice2")
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json(), {"success": False, "error": "User already exists with this email or username"})
        self.assertEqual(self.register(email="other@x.com").status_code, 409)

    def test_invalid_input_is_rejected_with_validation_envelope(self) -> None:
        for username, email, password in (
            ("al", "alice@x.com", "Passw0rd"),
            ("alice!", "alice@x.com", "Passw0rd"),
            ("alice", "not-an-email", "Passw0rd"),
            ("alice", "alice@x.com", "password"),
        ):
            with self.subTest(username=username, email=email, password=password):
                r = self.register(username, email, password)
                self.assertEqual(r.status_code, 400)
                self.assertEqual(r.json()["error"], "Validation failed")
                self.assertFalse(r.json()["success"])
        self.mailer.send_verification_email.assert_not_called()

    def test_malformed_addresses_are_rejected(self) -> None:
        for address in ("a@b..com", "a@-bad-.com", "a..b@example.com", ".a@example.com", "a@example.c_m"):
            with self.subTest(address=address):
                r = self.register(email=address)
                self.assertEqual(r.status_code, 400)
                self.assertEqual(r.json()["details"][0]["field"], "email")


class TestLoginAndVerification(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        r = self.client.post(
            self.url("/auth/register"),
            json={"username": "alice", "email": "alice@x.com", "password": "Passw0rd"},
        )
        self.assertEqual(r.status_code, 201, r.text)
        self.verification_token = self.mailer.send_verification_email.call_args.args[2]

    def test_wrong_password_and_unknown_email_give_identical_responses(self) -> None:
        wrong = self.client.post(self.url("/auth/login"), json={"email": "alice@x.com", "password": "Wr0ngpass"})
        unknown = self.client.post(self.url("/auth/login"), json={"email": "bob@x.com", "password": "Passw0rd"})
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.status_code, unknown.status_code)
        self.assertEqual(wrong.content, unknown.content)

    def test_unverified_account_cannot_create_post_until_verified(self) -> None:
        token = self.login("alice@x.com")
        r = self.client.post(self.url("/posts"), json=POST_BODY, headers=self.bearer(token))
        self.assertEqual(r.status_code, 403)
        self.assertIn("verification", r.json()["error"])

        r = self.client.post(self.url("/auth/verify-email"), json={"token": self.verification_token})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json(), {"success": True, "message": "Email verified successfully"})

        r = self.client.post(self.url("/posts"), json=POST_BODY, headers=self.bearer(token))
        self.assertEqual(r.status_code, 201, r.text)
        self.assertEqual(r.json()["data"]["post"]["status"], "draft")

    def test_verification_token_is_single_use(self) -> None:
        first = self.client.post(self.url("/auth/verify-email"), json={"token": self.verification_token})
        second = self.client.post(self.url("/auth/verify-email"), json={"token": self.verification_token})
        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.json()["error"], "Invalid or expired verification token")

    def test_me_and_refresh(self) -> None:
        token = self.login("alice@x.com")
        r = self.client.get(self.url("/auth/me"), headers=self.bearer(token))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"]["user"]["email"], "alice@x.com")

        r = self.client.post(self.url("/auth/refresh"), headers=self.bearer(token))
        self.assertEqual(r.status_code, 200)
        refreshed = r.json()["data"]["token"]
        self.assertEqual(self.client.get(self.url("/auth/me"), headers=self.bearer(refreshed)).status_code, 200)

    def test_logout_is_acknowledged_and_token_keeps_working(self) -> None:
        token = self.login("alice@x.com")
        r = self.client.post(self.url("/auth/logout"), headers=self.bearer(token))
        self.assertEqual(r.json()["message"], "Logged out successfully")
        self.assertEqual(self.client.get(self.url("/auth/me"), headers=self.bearer(token)).status_code, 200)

    def test_change_password(self) -> None:
        token = self.login("alice@x.com")
        r = self.client.post(
            self.url("/auth/change-password"),
            json={"currentPassword": "Wr0ngpass", "newPassword": "N3wPassword"},
            headers=self.bearer(token),
        )
        self.assertEqual(r.status_code, 401)
        r = self.client.post(
            self.url("/auth/change-password"),
            json={"currentPassword": "Passw0rd", "newPassword": "N3wPassword"},
            headers=self.bearer(token),
        )
        self.assertEqual(r.status_code, 200)
        self.login("alice@x.com", "N3wPassword")


class TestPasswordResetApi(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.create_account("alice")

    def test_forgot_password_response_does_not_reveal_existence(self) -> None:
        known = self.client.post(self.url("/auth/forgot-password"), json={"email": "alice@example.com"})
        unknown = self.client.post(self.url("/auth/forgot-password"), json={"email": "ghost@example.com"})
        self.assertEqual(known.status_code, 200)
        self.assertEqual(known.content, unknown.content)
        self.mailer.send_password_reset_email.assert_called_once()

    def test_reset_password_once(self) -> None:
        self.client.post(self.url("/auth/forgot-password"), json={"email": "alice@example.com"})
        token = self.mailer.send_password_reset_email.call_args.args[2]
        body = {"token": token, "newPassword": "N3wPassword"}
        self.assertEqual(self.client.post(self.url("/auth/reset-password"), json=body).status_code, 200)
        second = self.client.post(self.url("/auth/reset-password"), json=body)
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.json()["error"], "Invalid or expired reset token")
        self.login("alice@example.com", "N3wPassword")


class TestAccessGuard(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.alice_id = self.create_account("alice")

    def test_missing_token_is_401(self) -> None:
        r = self.client.get(self.url("/auth/me"))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json(), {"success": False, "error": "Access token required"})

    def test_non_bearer_scheme_is_401(self) -> None:
        r = self.client.get(self.url("/auth/me"), headers={"Authorization": "Basic YWxpY2U6eA=="})
        self.assertEqual(r.status_code, 401)

    def test_invalid_tokens_are_403(self) -> None:
        expired = TokenCodec(TEST_SECRET, clock=lambda: datetime.now(UTC) - timedelta(days=8)).issue(
            self.alice_id, "user"
        )
        foreign = TokenCodec("some-other-secret").issue(self.alice_id, "user")
        for token in ("garbage", expired, foreign):
            with self.subTest(token=token[:16]):
                r = self.client.get(self.url("/auth/me"), headers=self.bearer(token))
                self.assertEqual(r.status_code, 403)
                self.assertEqual(r.json()["error"], "Invalid or expired token")

    def test_token_for_deleted_account_is_401(self) -> None:
        self.create_account("root", role="admin")
        admin_token = self.login("root@example.com")
        token = self.login("alice@example.com")
        r = self.client.delete(self.url(f"/admin/users/{self.alice_id}"), headers=self.bearer(admin_token))
        self.assertEqual(r.status_code, 200, r.text)
        r = self.client.get(self.url("/auth/me"), headers=self.bearer(token))
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["error"], "Invalid token - user not found")

    def test_non_admin_is_forbidden_on_admin_routes(self) -> None:
        token = self.login("alice@example.com")
        self.assertEqual(self.client.get(self.url("/admin/users"), headers=self.bearer(token)).status_code, 403)


if __name__ == "__main__":
    unittest.main()
