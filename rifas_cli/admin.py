from __future__ import annotations

import argparse
import getpass
import os
import sys
import uuid
from pathlib import Path

# app.core.config reads the environment at import time, so app modules are
# imported inside the commands, after the .env file has been loaded.


def _load_env_file(env, path: Path) -> None:
    if not path.exists():
        return
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        env.setdefault(key, value)


def _require_db() -> None:
    from app.core.config import db_configured

    if not db_configured():
        raise RuntimeError("DB_HOST, DB_NAME, DB_USER and DB_PASSWORD are required")


def cmd_migrate(args: argparse.Namespace) -> int:
    _require_db()
    from app.cqrs.commands.migrations import run_migrations

    result = run_migrations()
    print(f"Schema up to date ({result['applied_at'].isoformat()})")
    return 0


def cmd_create_admin(args: argparse.Namespace) -> int:
    _require_db()
    from app.core.config import settings
    from app.cqrs.commands.users import ensure_initial_admin

    username = args.username or settings.admin_username
    password = args.password or settings.admin_password
    if not password:
        password = getpass.getpass(f"Password for {username}: ")
    user = ensure_initial_admin(username, password)
    if user is None:
        print("An admin account already exists; nothing to do.")
    else:
        print(f"Created admin {user['username']} ({user['id']})")
    return 0


def cmd_init_tickets(args: argparse.Namespace) -> int:
    _require_db()
    from app.cqrs.commands.tickets import initialize_tickets

    result = initialize_tickets(uuid.UUID(args.raffle_id))
    print(result["message"])
    print(f"created={result['created']} deleted={result['deleted']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rifas API administration")
    parser.add_argument("--env-file", default=os.getenv("ENV_FILE", ".env"))
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate = subparsers.add_parser("migrate", help="Create or update the database schema")
    migrate.set_defaults(func=cmd_migrate)

    create_admin = subparsers.add_parser("create-admin", help="Create the first admin user")
    create_admin.add_argument("--username")
    create_admin.add_argument("--password")
    create_admin.set_defaults(func=cmd_create_admin)

    init_tickets = subparsers.add_parser(
        "init-tickets", help="Reset a raffle's ticket pool to all-available"
    )
    init_tickets.add_argument("raffle_id")
    init_tickets.set_defaults(func=cmd_init_tickets)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _load_env_file(os.environ, Path(args.env_file).expanduser())
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
