"""Tests for CredentialStore against an in-memory SQLite database."""

import unittest
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import IntegrityError

from app.models import Comment, Post, User
from app.services.credential_store import CredentialStore
from tests.helpers import make_engine, make_session

TOKEN = "a" * 64


class CredentialStoreTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.session = make_session(self.engine)
        self.store = CredentialStore(self.session)
        self.alice = self.store.create_account(
            username="alice",
            email="alice@example.com",
            password_hash="hash-1",
            verification_token=TOKEN,
        )

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()


class TestLookups(CredentialStoreTestCase):
    def test_new_account_defaults(self) -> None:
        self.assertEqual(self.alice.role, "user")
        self.assertFalse(self.alice.is_verified)
        self.assertEqual(self.alice.verification_token, TOKEN)
        self.assertIsNone(self.alice.reset_token)
        self.assertIsNone(self.alice.reset_token_expires)
        self.assertIsNotNone(self.alice.created_at)

    def test_find_returns_none_when_absent(self) -> None:
        self.assertIsNone(self.store.find_by_email("nobody@example.com"))
        self.assertIsNone(self.store.find_by_username("nobody"))
        self.assertIsNone(self.store.find_by_id(9999))

    def test_find_by_each_key(self) -> None:
        self.assertEqual(self.store.find_by_email("alice@example.com").id, self.alice.id)
        self.assertEqual(self.store.find_by_username("alice").id, self.alice.id)
        self.assertEqual(self.store.find_by_id(self.alice.id).username, "alice")

    def test_exists_by_email_or_username(self) -> None:
        self.assertTrue(self.store.exists_by_email_or_username("alice@example.com", "other"))
        self.assertTrue(self.store.exists_by_email_or_username("other@example.com", "alice"))
        self.assertFalse(self.store.exists_by_email_or_username("other@example.com", "other"))

    def test_duplicate_email_raises_integrity_error(self) -> None:
        with self.assertRaises(IntegrityError):
            self.store.create_account("alice2", "alice@example.com", "h", None)
        # Session is usable after the rollback.
        self.assertIsNotNone(self.store.find_by_username("alice"))


class TestVerification(CredentialStoreTestCase):
    def test_token_consumed_exactly_once(self) -> None:
        self.assertTrue(self.store.set_verification_result(TOKEN))
        user = self.store.find_by_id(self.alice.id)
        self.assertTrue(user.is_verified)
        self.assertIsNone(user.verification_token)
        self.assertFalse(self.store.set_verification_result(TOKEN))

    def test_unknown_token_matches_nothing(self) -> None:
        self.assertFalse(self.store.set_verification_result("b" * 64))
        self.assertFalse(self.store.find_by_id(self.alice.id).is_verified)


class TestResetToken(CredentialStoreTestCase):
    def test_set_reset_token_only_for_known_email(self) -> None:
        expires = datetime.now(UTC) + timedelta(hours=1)
        self.assertTrue(self.store.set_reset_token("alice@example.com", TOKEN, expires))
        self.assertFalse(self.store.set_reset_token("nobody@example.com", TOKEN, expires))
        self.assertEqual(self.store.find_by_id(self.alice.id).reset_token, TOKEN)

    def test_consume_replaces_hash_and_clears_both_fields_once(self) -> None:
        now = datetime.now(UTC)
        self.store.set_reset_token("alice@example.com", TOKEN, now + timedelta(hours=1))
        self.assertTrue(self.store.consume_reset_token(TOKEN, "hash-2", now))
        user = self.store.find_by_id(self.alice.id)
        self.assertEqual(user.password_hash, "hash-2")
        self.assertIsNone(user.reset_token)
        self.assertIsNone(user.reset_token_expires)
        self.assertFalse(self.store.consume_reset_token(TOKEN, "hash-3", now))
        self.assertEqual(self.store.find_by_id(self.alice.id).password_hash, "hash-2")

    def test_expired_token_is_not_consumed(self) -> None:
        now = datetime.now(UTC)
        self.store.set_reset_token("alice@example.com", TOKEN, now - timedelta(seconds=1))
        self.assertFalse(self.store.consume_reset_token(TOKEN, "hash-2", now))
        self.assertEqual(self.store.find_by_id(self.alice.id).password_hash, "hash-1")


class TestAccountAdministration(CredentialStoreTestCase):
    def test_update_role_and_password(self) -> None:
        self.assertTrue(self.store.update_role(self.alice.id, "admin"))
        self.assertTrue(self.store.update_password(self.alice.id, "hash-9"))
        user = self.store.find_by_id(self.alice.id)
        self.assertEqual(user.role, "admin")
        self.assertEqual(user.password_hash, "hash-9")
        self.assertFalse(self.store.update_role(9999, "admin"))

    def test_update_profile(self) -> None:
        user = self.store.update_profile(self.alice.id, username="alicia")
        self.assertEqual(user.username, "alicia")
        self.assertEqual(user.email, "alice@example.com")
        self.assertIsNone(self.store.update_profile(9999, username="ghost"))

    def test_delete_cascades_to_posts_and_comments(self) -> None:
        bob = self.store.create_account("bob", "bob@example.com", "h", None)
        post = Post(author_id=self.alice.id, title="A post by alice", content="x", status="published")
        self.session.add(post)
        self.session.commit()
        self.session.add_all(
            [
                Comment(author_id=bob.id, post_id=post.id, content="on alice's post"),
                Comment(author_id=self.alice.id, post_id=post.id, content="self reply"),
            ]
        )
        self.session.commit()

        self.assertTrue(self.store.delete_account(self.alice.id))
        self.assertIsNone(self.store.find_by_id(self.alice.id))
        self.assertEqual(self.session.query(Post).count(), 0)
        self.assertEqual(self.session.query(Comment).count(), 0)
        self.assertEqual(self.session.query(User).count(), 1)
        self.assertFalse(self.store.delete_account(self.alice.id))

    def test_list_accounts(self) -> None:
        self.store.create_account("bob", "bob@example.com", "h", None)
        names = {u.username for u in self.store.list_accounts()}
        self.assertEqual(names, {"alice", "bob"})


if __name__ == "__main__":
    unittest.main()
