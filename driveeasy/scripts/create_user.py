"""
Create an account (e.g. the first admin). Run from project root:
  python -m driveeasy.scripts.create_user NAME EMAIL PASSWORD [role]
Example:
  python -m driveeasy.scripts.create_user "Site Admin" admin@driveeasy.test your-secure-password admin
"""
import argparse
import sys

from driveeasy.core.config import get_settings
from driveeasy.core.database import session_scope
from driveeasy.core.errors import ValidationError
from driveeasy.models.user import ROLE_USER, VALID_ROLES
from driveeasy.services.accounts import register_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a DriveEasy account.")
    parser.add_argument("name", help="Display name (at least 2 chars)")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (at least 6 chars)")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=list(VALID_ROLES))
    args = parser.parse_args(argv)

    with session_scope() as db:
        try:
            user = register_user(
                db,
                name=args.name,
                email=args.email,
                password=args.password,
                role=args.role,
                bcrypt_rounds=get_settings().BCRYPT_ROUNDS,
            )
        except ValidationError as e:
            print(e.error, file=sys.stderr)
            return 1
        print(f"Created user '{user.email}' (id={user.id}) with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
