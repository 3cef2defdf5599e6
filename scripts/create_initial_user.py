"""Create the first administrator account."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from tracker.application.errors import ValidationError
from tracker.application.use_cases.users import create_user
from tracker.domain.entities import ROLE_ADMIN
from tracker.infrastructure.database import SessionLocal, initialize_database
from tracker.infrastructure.repositories import PrivilegedUserRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create an initial administrator for the tracker service.",
    )
    parser.add_argument("--name", default="Administrator", help="Display name (default: Administrator)")
    parser.add_argument(
        "--email", default="admin@example.com", help="Login email (default: admin@example.com)"
    )
    parser.add_argument("--chat-handle", default=None, help="Discord user id used for mentions")
    parser.add_argument(
        "--password",
        default=None,
        help="Account password. Prompted for interactively when omitted.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    password = args.password or getpass("Password for the new administrator: ")
    if not password:
        raise SystemExit("A password is required.")

    initialize_database()

    session = SessionLocal()
    try:
        user = create_user(
            PrivilegedUserRepository(session),
            name=args.name,
            email=args.email,
            password=password,
            chat_handle=args.chat_handle,
            role=ROLE_ADMIN,
        )
    except ValidationError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the user: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Database error while saving the user: {exc}") from exc
    else:
        print(
            "Administrator created:\n"
            f"  ID: {user.id}\n"
            f"  Name: {user.name}\n"
            f"  Email: {user.email}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
