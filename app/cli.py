"""CLI commands for EatsAdvisor."""

import argparse
import sys

from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.user import AppUser
from app.seed_reference_data import seed_reference_data
from app.services.auth import get_auth_provider


def create_session(email: str, name: str | None = None) -> str:
    """
    Mint a session token for a user, creating the AppUser if needed.

    Development stand-in for the external identity flow.
    """
    if not email or "@" not in email:
        print(f"Error: Invalid email address '{email}'.")
        sys.exit(1)

    db: Session = SessionLocal()

    try:
        user = db.query(AppUser).filter(AppUser.email == email).first()
        if not user:
            user = AppUser(email=email, name=name)
            db.add(user)
            db.commit()
            db.refresh(user)
            print(f"Created user: {email}")

        token = get_auth_provider().create_session(db, user, user_agent="cli")
        print(token)
        return token

    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="EatsAdvisor CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "seed-reference-data",
        help="Create the default dietary constraints and flavors",
    )

    create_session_parser = subparsers.add_parser(
        "create-session", help="Create a session token for a user"
    )
    create_session_parser.add_argument(
        "--email", required=True, help="User email address"
    )
    create_session_parser.add_argument(
        "--name", help="Display name, used when the user is created"
    )

    args = parser.parse_args()

    if args.command == "seed-reference-data":
        seed_reference_data()
    elif args.command == "create-session":
        create_session(args.email, args.name)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
