#!/usr/bin/env python3
"""
Manage admin accounts stored in the remote users.json.

Usage:
  python scripts/manage_users.py list
  python scripts/manage_users.py add --username maria --email maria@example.com [--role admin] [--password ...]
  python scripts/manage_users.py remove --username maria
  python scripts/manage_users.py passwd --username maria [--password ...]
  python scripts/manage_users.py activate|deactivate --username maria

Storage is configured through the same FTP_* / STORAGE_BACKEND variables as the server.
"""
from __future__ import annotations

import argparse
import getpass
import sys
from typing import Optional, Sequence

from artbat_admin.app_factory import build_storage
from artbat_admin.core.config import get_settings
from artbat_admin.core.logs import configure_logging
from artbat_admin.repositories.documents import DocumentRepository
from artbat_admin.repositories.errors import StorageError
from artbat_admin.repositories.users import ROLE_ADMIN, ROLE_EDITOR, UserStore, UserStoreError


def build_store() -> UserStore:
    settings = get_settings()
    documents = DocumentRepository(build_storage(settings), settings.staging_dir)
    return UserStore(documents)


def _password(given: Optional[str]) -> str:
    if given:
        return given
    first = getpass.getpass("Password: ")
    if first != getpass.getpass("Repeat password: "):
        raise SystemExit("Passwords do not match")
    return first


def cmd_list(store: UserStore, args: argparse.Namespace) -> None:
    store.refresh()
    users = store.all()
    if not users:
        print("No users")
        return
    for index, user in enumerate(users, start=1):
        state = "active" if user.is_active else "inactive"
        print(f"{index}. {user.username} ({user.email or '-'}) role={user.role} {state}")
        if user.last_login:
            print(f"   last login: {user.last_login}")


def cmd_add(store: UserStore, args: argparse.Namespace) -> None:
    user = store.add_user(args.username, _password(args.password), email=args.email or "", role=args.role)
    print(f"OK: user {user.username} added (role {user.role})")


def cmd_remove(store: UserStore, args: argparse.Namespace) -> None:
    store.remove_user(args.username)
    print(f"OK: user {args.username} removed")


def cmd_passwd(store: UserStore, args: argparse.Namespace) -> None:
    store.set_password(args.username, _password(args.password))
    print(f"OK: password changed for {args.username}")


def cmd_activate(store: UserStore, args: argparse.Namespace) -> None:
    store.set_active(args.username, True)
    print(f"OK: {args.username} activated")


def cmd_deactivate(store: UserStore, args: argparse.Namespace) -> None:
    store.set_active(args.username, False)
    print(f"OK: {args.username} deactivated")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Manage ARTBAT Prague admin users")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List users").set_defaults(func=cmd_list)

    add = sub.add_parser("add", help="Add a user")
    add.add_argument("--username", required=True)
    add.add_argument("--email", default="")
    add.add_argument("--role", choices=(ROLE_ADMIN, ROLE_EDITOR), default=ROLE_EDITOR)
    add.add_argument("--password", help="Prompted when omitted")
    add.set_defaults(func=cmd_add)

    for name, func, helptext in (
        ("remove", cmd_remove, "Remove a user"),
        ("activate", cmd_activate, "Re-enable a user"),
        ("deactivate", cmd_deactivate, "Disable a user without deleting it"),
    ):
        p = sub.add_parser(name, help=helptext)
        p.add_argument("--username", required=True)
        p.set_defaults(func=func)

    passwd = sub.add_parser("passwd", help="Change a password")
    passwd.add_argument("--username", required=True)
    passwd.add_argument("--password", help="Prompted when omitted")
    passwd.set_defaults(func=cmd_passwd)
    return ap


def main(argv: Optional[Sequence[str]] = None, store: Optional[UserStore] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)
    store = store or build_store()
    try:
        args.func(store, args)
    except UserStoreError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 2
    except StorageError as exc:
        sys.stderr.write(f"Error: {exc.message}\n")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
