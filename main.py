#!/usr/bin/env python3
"""
PeanechEstate -- command-line client for the local session and listings.

Every invocation is a fresh process: it rehydrates the session from durable
storage first, exactly as the web client does on page load.

Usage:
  python main.py login admin@demo.com
  python main.py login newbie@example.com --role agent
  python main.py whoami
  python main.py check admin super_admin
  python main.py properties --search ca --bedrooms 4+
  python main.py logout

Environment variables:
  STORAGE_URL          SQLAlchemy URL of the session store (default: peanech_storage.db)
  LOGIN_DELAY_SECONDS  Simulated sign-in latency (default: 1.0)
"""

import argparse
import asyncio
import sys
from typing import Optional

from auth.access import AccessControl
from auth.models import Role
from auth.session import SessionStore
from listings.catalog import PropertyCatalog
from listings.models import BEDROOM_OPTIONS, PROPERTY_TYPES, PropertyFilter
from storage.store import LocalStorage


def _format_price(price: int) -> str:
    return f"${price:,}"


def cmd_login(store: SessionStore, args: argparse.Namespace) -> int:
    role: Optional[Role] = Role(args.role) if args.role else None
    print(f"  Signing in as {args.email}...", end=" ", flush=True)
    ok = asyncio.run(store.login(args.email, args.password, role))
    if not ok:
        print("failed.")
        print("  [!] Unable to sign in with those details.")
        return 1
    print("done.")
    print(f"  {store.current.name} ({store.current.role.label})")
    return 0


def cmd_logout(store: SessionStore, args: argparse.Namespace) -> int:
    store.logout()
    print("  Signed out.")
    return 0


def cmd_whoami(store: SessionStore, args: argparse.Namespace) -> int:
    identity = store.current
    if identity is None:
        print("  Not signed in.")
        return 1
    print(f"  {identity.name} <{identity.email}>")
    print(f"  id:   {identity.id}")
    print(f"  role: {identity.role.value}")
    return 0


def cmd_check(store: SessionStore, args: argparse.Namespace) -> int:
    """Exit 0 when the session satisfies the allow-list, 1 otherwise."""
    decision = AccessControl(store).check(args.roles)
    required = ", ".join(r.value for r in decision.required_roles) or "(none)"
    if decision.granted:
        print(f"  Granted ({decision.actual_role.value} in {required}).")
        return 0
    if decision.actual_role is None:
        print("  Authentication required. Sign in first.")
    else:
        print(f"  Access denied. Required roles: {required}. Your current role: {decision.actual_role.value}.")
    return 1


def cmd_properties(store: SessionStore, args: argparse.Namespace) -> int:
    criteria = PropertyFilter(
        search=args.search,
        min_price=args.min_price,
        max_price=args.max_price,
        property_type=args.type,
        bedrooms=args.bedrooms,
    )
    results = PropertyCatalog().list_properties(criteria)
    if not results:
        print("  No properties match those filters.")
        return 0
    for prop in results:
        star = "*" if prop.featured else " "
        print(
            f" {star}{prop.title:<24} {prop.location:<20} {_format_price(prop.price):>12}  "
            f"{prop.bedrooms}bd/{prop.bathrooms}ba  {prop.square_footage} sqft  [{prop.status}]"
        )
    print(f"\n  {len(results)} propert{'y' if len(results) == 1 else 'ies'} found.")
    return 0


_COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "whoami": cmd_whoami,
    "check": cmd_check,
    "properties": cmd_properties,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peanech",
        description="Local session and listings client for PeanechEstate.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Demo accounts (any password):
  visitor@demo.com  agent@demo.com  admin@demo.com  superadmin@demo.com
        """,
    )
    parser.add_argument(
        "--storage-url",
        metavar="URL",
        default=None,
        help="SQLAlchemy URL of the session store (default: STORAGE_URL or peanech_storage.db)",
    )
    sub = parser.add_subparsers(dest="command")

    p_login = sub.add_parser("login", help="Sign in as a demo account, or create one with --role")
    p_login.add_argument("email")
    p_login.add_argument("--password", default="", help="Accepted but not verified")
    p_login.add_argument(
        "--role",
        choices=[r.value for r in Role],
        default=None,
        help="Role for an email that matches no demo account",
    )

    sub.add_parser("logout", help="End the current session")
    sub.add_parser("whoami", help="Show the signed-in identity")

    p_check = sub.add_parser("check", help="Test the session against an allow-list of roles")
    p_check.add_argument("roles", nargs="*", type=Role, metavar="ROLE", help="visitor, agent, admin, or super_admin")

    p_props = sub.add_parser("properties", help="List properties matching filters")
    p_props.add_argument("--search", default="", help="Substring of title or location")
    p_props.add_argument("--min-price", type=int, default=0)
    p_props.add_argument("--max-price", type=int, default=2_000_000)
    p_props.add_argument("--type", choices=["all", *PROPERTY_TYPES], default="all")
    p_props.add_argument("--bedrooms", choices=list(BEDROOM_OPTIONS), default="any")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 2

    storage = LocalStorage(args.storage_url)
    try:
        store = SessionStore(storage)
        store.initialize()
        return _COMMANDS[args.command](store, args)
    finally:
        storage.close()


if __name__ == "__main__":
    sys.exit(main())
