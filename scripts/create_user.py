import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mapshare.application import create_database
from mapshare.auth import AuthService
from mapshare.config import load_settings
from mapshare.errors import AuthError


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a Mapshare user")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (defaults to the configured database)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password:
            print("Password must not be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    settings = load_settings()
    if args.db_path:
        settings = settings.with_overrides({"MAPSHARE_DB_PATH": args.db_path})

    auth = AuthService(create_database(settings))
    try:
        user = auth.register(args.email, password)
    except AuthError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: <{user.email}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
