import argparse
from datetime import timedelta

from feedback_api.auth import create_access_token


def parse_args():
    parser = argparse.ArgumentParser(description="Issue a bearer token for protected feedback API routes.")
    parser.add_argument(
        "--subject",
        default="admin",
        help="Identity stored in the token's sub claim.",
    )
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime in minutes (defaults to ACCESS_TOKEN_EXPIRE_MINUTES).",
    )
    return parser.parse_args()


def main():
    args = parse_args()
    if args.minutes is not None and args.minutes <= 0:
        raise SystemExit("--minutes must be positive")

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(args.subject, expires_delta=expires))


if __name__ == "__main__":
    main()
