"""Development helper that prints a bearer token for a marketplace user."""

from __future__ import annotations

import argparse
from datetime import timedelta

from tourhub.domain.entities import ROLE_AGENT, ROLE_CUSTOMER, ROLE_SUPER_ADMIN
from tourhub.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for token issuance."""

    parser = argparse.ArgumentParser(
        description="Issue an access token for calling the tourhub API locally.",
    )
    parser.add_argument("user_id", help="Identifier of the user the token represents")
    parser.add_argument(
        "--role",
        default=ROLE_CUSTOMER,
        choices=[ROLE_CUSTOMER, ROLE_AGENT, ROLE_SUPER_ADMIN],
        help="Role claim embedded in the token (default: customer)",
    )
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (default: ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(args.user_id, args.role, expires_delta=expires))


if __name__ == "__main__":
    main()
