import argparse
import getpass
import logging
import sys
from functools import partial

import uvicorn

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteUnitOfWork
from src.api.auth_utils import hash_password
from src.api.deps import Settings
from src.components.proposals import ProposalFilters, ProposalService
from src.components.review import ReviewComponent
from src.domain.entities import UserProfile
from src.domain.errors import ModerationError
from src.rules.loader import load_rules
from src.rules.models import Rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def get_rules(settings: Settings) -> Rules:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        sys.exit(1)
    return load_rules(settings.rules_path)


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def handle_create_user(settings: Settings, args: argparse.Namespace) -> None:
    rules = get_rules(settings)
    password = args.password or getpass.getpass("Password: ")
    password_hash = hash_password(password, rules.auth.password_hashing)

    with SQLiteUnitOfWork(settings.db_path) as uow:
        if uow.profiles.get_by_email(args.email):
            logger.error("Profile %s already exists.", args.email)
            sys.exit(1)
        profile = UserProfile(
            email=args.email,
            full_name=args.name,
            role=args.role,
            password_hash=password_hash,
        )
        uow.profiles.save(profile)
        uow.commit()

    print(f"Created {profile.role} {profile.email} ({profile.id})")


def handle_list_pending(settings: Settings, args: argparse.Namespace) -> None:
    service = ProposalService(partial(SQLiteUnitOfWork, settings.db_path), SystemClock())
    pending = service.list(ProposalFilters(status="pending"))
    if not pending:
        print("No pending proposals.")
        return
    for p in pending:
        print(f"{p.id}  {p.created_at:%Y-%m-%d %H:%M}  {p.content_type:<9}  {p.title}")


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    uvicorn.run("src.api.main:app", host=args.host, port=args.port)


def handle_reconcile(settings: Settings, args: argparse.Namespace) -> None:
    rules = get_rules(settings)
    review = ReviewComponent(
        partial(SQLiteUnitOfWork, settings.db_path),
        SystemClock(),
        proposal_rules=rules.proposals,
        review_rules=rules.review,
    )
    report = review.reconcile()
    print(
        f"Checked {report.checked} approved proposal(s): "
        f"{len(report.repaired)} repaired, {len(report.skipped)} skipped."
    )
    for r in report.repaired:
        print(f"  + {r.proposal_id} -> {r.collection}/{r.record_id} ({r.slug})")
    for s in report.skipped:
        print(f"  ! {s.proposal_id}: {s.reason}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="DeFi México moderation CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-user
    user_parser = subparsers.add_parser("create-user", help="Create a profile")
    user_parser.add_argument("email", help="Login email")
    user_parser.add_argument(
        "--role", choices=["admin", "editor", "user"], default="user", help="Role to assign"
    )
    user_parser.add_argument("--password", help="Password (prompted if omitted)")
    user_parser.add_argument("--name", help="Display name")

    # list-pending
    subparsers.add_parser("list-pending", help="List proposals waiting for review")

    # reconcile
    subparsers.add_parser(
        "reconcile", help="Insert missing records for approved proposals"
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    settings = Settings()

    handlers = {
        "migrate": handle_migrate,
        "create-user": handle_create_user,
        "list-pending": handle_list_pending,
        "reconcile": handle_reconcile,
        "serve": handle_serve,
    }
    try:
        handlers[args.command](settings, args)
    except ModerationError as e:
        logger.error("%s failed: %s", args.command, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
