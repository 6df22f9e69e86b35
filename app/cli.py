"""Command line helper to create users directly in the database."""

import argparse
import getpass
import os
import sys
from typing import Optional, Sequence

from app.config import Settings
from app.core.exceptions import AppError, ValidationError
from app.core.security import PasswordHasher
from app.domain.validation import decode_new_user
from app.infrastructure.database import build_engine, build_session_factory, init_db
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an identity service user")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument("--role", choices=["admin", "user"], default="user")
    parser.add_argument("--salary", default=None, help="Optional salary (admin-visible)")
    parser.add_argument("--national-id", dest="national_id", default=None, help="Optional id, DDD-DD-DDDD")
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL", Settings.model_fields["DATABASE_URL"].default),
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=int(os.getenv("BCRYPT_ROUNDS", Settings.model_fields["BCRYPT_ROUNDS"].default)),
        help="bcrypt cost factor",
    )
    return parser.parse_args(argv)


def parse_salary(value: str):
    """Command line salaries arrive as text. Unparseable text is left for validation to reject."""
    try:
        return float(value)
    except ValueError:
        return value


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main(argv: Optional[Sequence[str]] = None, password: Optional[str] = None) -> int:
    args = parse_args(argv)
    if password is None:
        password = os.getenv("NEW_USER_PASSWORD") or prompt_for_password()

    raw = {
        "name": args.name.strip(),
        "email": args.email,
        "password": password,
        "role": args.role,
    }
    if args.salary is not None:
        raw["salary"] = parse_salary(args.salary)
    if args.national_id is not None:
        raw["national_id"] = args.national_id

    try:
        new_user = decode_new_user(raw)
    except ValidationError as exc:
        for err in exc.errors:
            print(f"Error: {err['field']}: {err['message']}", file=sys.stderr)
        return 1

    engine = build_engine(args.database_url)
    init_db(engine)
    db = build_session_factory(engine)()
    try:
        repo = SQLAlchemyUserRepository(db)
        if repo.find_by_email(new_user.email) is not None:
            print(f"Error: a user with email {new_user.email} already exists", file=sys.stderr)
            return 1
        user = repo.create(new_user, PasswordHasher(rounds=args.rounds).hash(new_user.password))
    except AppError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
        engine.dispose()

    print(f"Created {user.role.value} {user.id}: {user.name} <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
