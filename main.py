"""Command-line interface for the Mapshare web application."""

from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from mapshare.application import create_application, create_database
from mapshare.config import Settings, load_settings
from mapshare.database import Database

logger = logging.getLogger("mapshare.main")

_KNOWN_COMMANDS = {"serve", "init-db", "users"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    # Shared options are accepted both before and after the sub-command.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=argparse.SUPPRESS,
        help="Path to the settings file (default: MAPSHARE_CONFIG or config/settings.yaml)",
    )
    common.add_argument(
        "--env",
        dest="environment",
        default=argparse.SUPPRESS,
        help="Settings environment to use (default: MAPSHARE_ENV or development)",
    )

    parser = argparse.ArgumentParser(description="Mapshare web application utilities", parents=[common])
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Start the HTTP server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the server")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP server (default: 8080)",
    )

    subparsers.add_parser("init-db", parents=[common], help="Create the database tables")
    subparsers.add_parser("users", parents=[common], help="List registered accounts")

    args_list = list(argv) if argv is not None else sys.argv[1:]

    # Without a sub-command every option belongs to ``serve``.
    wants_help = bool(args_list) and args_list[0] in ("-h", "--help")
    if not wants_help and not any(arg in _KNOWN_COMMANDS for arg in args_list):
        args_list = ["serve", *args_list]

    args = parser.parse_args(args_list)
    for name in ("config", "environment"):
        if not hasattr(args, name):
            setattr(args, name, None)
    return args


def _load(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config).expanduser() if args.config else None
    return load_settings(config_path=config_path, environment=args.environment)


def _initialise_database(settings: Settings) -> Database:
    database = create_database(settings)
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, settings: Settings, database: Database, host: str, port: int) -> None:
    import uvicorn

    logger.info("Starting Mapshare (%s) on http://%s:%s", settings.environment, host, port)
    app = create_application(settings, database=database)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


def _list_users(database: Database) -> None:
    users = database.list_users()
    if not users:
        print("No users are currently registered.")
        return

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':>4}  {'Email':<40}  Created")
    print("-" * 72)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S %Z")
        print(f"{user.id:>4}  {user.email:<40}  {created}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    args = _parse_args(argv)
    settings = _load(args)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(settings=settings, database=database, host=args.host, port=args.port)
    elif args.command == "users":
        _list_users(database)
    elif args.command == "init-db":
        print("Database initialisation complete.")


if __name__ == "__main__":
    main()
