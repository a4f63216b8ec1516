"""Command-line front end for the remote users collection.

This module serves as a CLI wrapper around usermirror.core.user_store.
"""
from __future__ import annotations
import argparse
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from usermirror.config import load_settings
from usermirror.core.gorest import UserGateway, UsersApiClient
from usermirror.core.models import FilterCriteria, GENDER_FILTERS, GENDERS, STATUSES, UserRecord
from usermirror.core.user_store import UserCollectionStore


def confirm_delete(record: UserRecord) -> bool:
    """Ask the operator on stdin before deleting."""
    try:
        answer = input(f"Are you sure you want to delete this user? {record.name} <{record.email}> [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _print_records(records) -> None:
    print(f"{'ID':>8}  {'NAME':<30} {'EMAIL':<40} {'GENDER':<7} STATUS")
    for record in records:
        print(f"{record.id:>8}  {record.name:<30} {record.email:<40} {record.gender:<7} {record.status}")


def _fail(cmd: str, result) -> None:
    print(f"[{cmd}] Error: {result.message}", file=sys.stderr)
    for field, message in sorted(result.field_errors.items()):
        print(f"[{cmd}]   {field}: {message}", file=sys.stderr)
    sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Remote users collection manager")
    parser.add_argument("--base-url", default=None, help="Users API base URL (default: USERS_API_BASE_URL)")
    parser.add_argument("--token", default=None, help="Bearer token (default: USERS_API_TOKEN)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--operator", default=os.environ.get("USERS_OPERATOR", "cli"),
                        help="Operator identifier for audit logs (default: cli)")

    sub = parser.add_subparsers(dest="cmd")

    sl = sub.add_parser("list")
    sl.add_argument("--gender", choices=GENDER_FILTERS, default="all")
    sl.add_argument("--name", default="")

    sc = sub.add_parser("create")
    sc.add_argument("--name", required=True)
    sc.add_argument("--email", required=True)
    sc.add_argument("--gender", choices=GENDERS, required=True)
    sc.add_argument("--status", choices=STATUSES, default="active")

    su = sub.add_parser("update")
    su.add_argument("--id", type=int, required=True)
    su.add_argument("--name")
    su.add_argument("--email")
    su.add_argument("--gender", choices=GENDERS)
    su.add_argument("--status", choices=STATUSES)

    sd = sub.add_parser("delete")
    sd.add_argument("--id", type=int, required=True)
    sd.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")

    return parser


def build_store(args) -> UserCollectionStore:
    cfg = load_settings()
    client = UsersApiClient(
        args.base_url or cfg.api_base_url,
        token=args.token if args.token is not None else cfg.api_token,
        timeout=args.timeout if args.timeout is not None else cfg.request_timeout,
    )
    return UserCollectionStore(UserGateway(client), confirm=confirm_delete, operator=args.operator)


def main(argv=None) -> None:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return

    store = build_store(args)

    if args.cmd == "create":
        # Creates do not need the collection loaded
        store.begin_create()
        store.update_draft(name=args.name, email=args.email, gender=args.gender, status=args.status)
        result = store.submit_session()
        if not result.ok:
            _fail(args.cmd, result)
        print(f"[create] Created user {result.record.id}")
        _print_records([result.record])
        return

    loaded = store.initialize()
    if not loaded.ok:
        _fail(args.cmd, loaded)

    if args.cmd == "list":
        _print_records(store.visible_records(FilterCriteria(args.gender, args.name)))
    elif args.cmd == "update":
        result = store.begin_edit(args.id)
        if not result.ok:
            _fail(args.cmd, result)
        store.update_draft(name=args.name, email=args.email, gender=args.gender, status=args.status)
        result = store.submit_session()
        if not result.ok:
            _fail(args.cmd, result)
        print(f"[update] Updated user {result.record.id}")
        _print_records([result.record])
    elif args.cmd == "delete":
        confirm = (lambda record: True) if args.yes else None
        result = store.request_delete(args.id, confirm=confirm)
        if result.declined:
            print("[delete] Cancelled")
            return
        if not result.ok:
            _fail(args.cmd, result)
        print(f"[delete] Deleted user {args.id}")


if __name__ == "__main__":
    main()
