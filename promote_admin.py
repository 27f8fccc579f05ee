# promote_admin.py
"""
Out-of-band role assignment.

There is no HTTP endpoint that changes a role; an operator runs this
against the configured DATABASE_URL instead:

    python promote_admin.py someone@example.com
    python promote_admin.py someone@example.com --role standard

The user has to sign in again before the new role shows up in their
session token.
"""
import argparse
import sys

from sqlmodel import Session

from goodie.core.config import get_settings
from goodie.core.errors import NotFoundError
from goodie.database import dispose_engine, get_engine, init_engine
from goodie.models.user import Role
from goodie.repositories.user_repo import UserRepository
from goodie.services.user_service import UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Set the role of a Goodie user.")
    parser.add_argument("email", help="email of an existing user")
    parser.add_argument(
        "--role",
        choices=[r.value for r in Role],
        default=Role.ADMIN.value,
        help="role to assign (default: admin)",
    )
    args = parser.parse_args(argv)

    init_engine(get_settings().DATABASE_URL)
    service = UserService(UserRepository())
    try:
        with Session(get_engine()) as session:
            user = service.set_role_by_email(session, args.email, Role(args.role))
    except NotFoundError:
        print(f"No user with email {args.email}")
        return 1
    finally:
        dispose_engine()

    print(f"{user.email} is now {user.role.value}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
