"""
Credential store: every read and write of account identity state.

Lookups return the row or None; writes that target a row return whether a row
matched. Token consumption (verification and reset) is a single conditional
UPDATE so two concurrent uses of the same token cannot both succeed.
"""

from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import User


class CredentialStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
        verification_token: str | None,
        role: str = "user",
        is_verified: bool = False,
    ) -> User:
        """Insert a new account. Raises IntegrityError if username or email is taken."""
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            verification_token=verification_token,
            role=role,
            is_verified=is_verified,
        )
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            raise
        self._session.refresh(user)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self._session.query(User).filter(User.email == email).first()

    def find_by_id(self, account_id: int) -> User | None:
        return self._session.get(User, account_id)

    def find_by_username(self, username: str) -> User | None:
        return self._session.query(User).filter(User.username == username).first()

    def exists_by_email_or_username(self, email: str, username: str) -> bool:
        """Single existence query covering both unique identifiers."""
        row = (
            self._session.query(User.id)
            .filter(or_(User.email == email, User.username == username))
            .first()
        )
        return row is not None

    def set_verification_result(self, token: str) -> bool:
        """Mark the account holding this verification token as verified and clear the token."""
        updated = (
            self._session.query(User)
            .filter(User.verification_token == token)
            .update(
                {User.is_verified: True, User.verification_token: None},
                synchronize_session=False,
            )
        )
        self._session.commit()
        return updated > 0

    def set_reset_token(self, email: str, token: str, expires: datetime) -> bool:
        updated = (
            self._session.query(User)
            .filter(User.email == email)
            .update(
                {User.reset_token: token, User.reset_token_expires: expires},
                synchronize_session=False,
            )
        )
        self._session.commit()
        return updated > 0

    def consume_reset_token(self, token: str, new_hash: str, now: datetime) -> bool:
        """
        Replace the password and clear both reset fields, but only where the token
        matches and has not expired. Validation and clearing happen in one statement.
        """
        updated = (
            self._session.query(User)
            .filter(User.reset_token == token, User.reset_token_expires > now)
            .update(
                {
                    User.password_hash: new_hash,
                    User.reset_token: None,
                    User.reset_token_expires: None,
                },
                synchronize_session=False,
            )
        )
        self._session.commit()
        return updated > 0

    def update_password(self, account_id: int, new_hash: str) -> bool:
        updated = (
            self._session.query(User)
            .filter(User.id == account_id)
            .update({User.password_hash: new_hash}, synchronize_session=False)
        )
        self._session.commit()
        return updated > 0

    def update_profile(
        self,
        account_id: int,
        username: str | None = None,
        email: str | None = None,
    ) -> User | None:
        """Change username and/or email. Raises IntegrityError on a uniqueness race."""
        user = self.find_by_id(account_id)
        if user is None:
            return None
        if username:
            user.username = username
        if email:
            user.email = email
        try:
            self._session.commit()
        except IntegrityError:
            self._session.rollback()
            raise
        self._session.refresh(user)
        return user

    def update_role(self, account_id: int, role: str) -> bool:
        updated = (
            self._session.query(User)
            .filter(User.id == account_id)
            .update({User.role: role}, synchronize_session=False)
        )
        self._session.commit()
        return updated > 0

    def delete_account(self, account_id: int) -> bool:
        """Delete the account together with its posts and comments."""
        user = self.find_by_id(account_id)
        if user is None:
            return False
        self._session.delete(user)
        self._session.commit()
        return True

    def list_accounts(self) -> list[User]:
        return self._session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
