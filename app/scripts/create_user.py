"""
Create an account from the command line (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m app.scripts.create_user admin admin@example.com 'S3cure-password' admin

Accounts created here are marked verified: the operator vouches for the address.
"""
import argparse
import re
import sys

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from app.core.config import get_settings
from app.core.database import session_scope
from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    ROLES,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
    USERNAME_PATTERN,
    hash_password,
)
from app.schemas.auth import normalize_email
from app.services.credential_store import CredentialStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Quillpad account (bypasses email verification).")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} letters, digits, _)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLES))
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not (USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN) or not re.match(
        USERNAME_PATTERN, username
    ):
        print("Invalid username.", file=sys.stderr)
        return 1
    try:
        email = normalize_email(args.email)
    except ValidationError:
        print(f"Invalid email address: {args.email!r}", file=sys.stderr)
        return 1
    if len(args.password) < PASSWORD_MIN_LEN or len(args.password) > PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    try:
        with session_scope() as db:
            store = CredentialStore(db)
            if store.exists_by_email_or_username(email, username):
                print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
                return 1
            store.create_account(
                username=username,
                email=email,
                password_hash=hash_password(args.password, rounds=get_settings().BCRYPT_ROUNDS),
                verification_token=None,
                role=args.role,
                is_verified=True,
            )
    except IntegrityError:
        print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
        return 1
    print(f"Created user '{username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
