"""
Entry point for the unifi-client CLI.

Usage:
    unifi-client --test                       Validate configuration and connection
    unifi-client guests list                  List guest authorizations
    unifi-client guests authorize MAC         Authorize a guest device
    unifi-client vouchers create --count 5    Create hotspot vouchers
    unifi-client sites list                   List visible sites
    unifi-client --help                       Show help message

Exit Codes:
    0 - Success
    1 - Configuration or API error
    2 - Connection error (cannot reach UniFi Controller)
    3 - Authentication error (invalid credentials, wrong account type)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from unifi_client import __version__

if TYPE_CHECKING:
    import httpx

    from unifi_client.api import UnifiClient
    from unifi_client.config import UnifiSettings

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_CONNECTION_ERROR = 2
EXIT_AUTH_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="unifi-client",
        description="Manage guests, vouchers and sites on a UniFi Controller",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit Codes:
  0   Success
  1   Configuration or API error
  2   Connection error (cannot reach controller)
  3   Authentication error (invalid credentials)

Environment Variables:
  CONFIG_PATH             Path to YAML configuration file
  UNIFI_CONTROLLER_URL    Controller URL, e.g. https://192.168.1.1
  UNIFI_USERNAME          UniFi admin username
  UNIFI_PASSWORD          UniFi admin password
  UNIFI_PASSWORD_FILE     Path to file containing password (Docker secrets)
  UNIFI_SITE              Site name (default: default)
  UNIFI_VERIFY_SSL        Enable SSL verification (default: true)
  UNIFI_LOG_LEVEL         Logging level: DEBUG, INFO, WARNING, ERROR
  UNIFI_LOG_FORMAT        Log format: json or text

Examples:
  # Test configuration and connection
  unifi-client --test

  # Give a guest two hours of access at 2 Mbps down
  unifi-client guests authorize aa:bb:cc:dd:ee:ff --minutes 120 --down 2048

  # Print a day's worth of single-use vouchers as JSON
  unifi-client --json vouchers create --count 10 --minutes 1440 --note "front desk"
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Test configuration and connection, then exit",
    )
    parser.add_argument("--config", metavar="PATH", help="YAML configuration file")
    parser.add_argument("--site", help="Site to operate on (overrides configuration)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")

    commands = parser.add_subparsers(dest="resource", metavar="RESOURCE")

    guests = commands.add_parser("guests", help="Guest authorizations")
    guest_actions = guests.add_subparsers(dest="action", metavar="ACTION", required=True)
    guest_list = guest_actions.add_parser("list", help="List guest authorizations")
    guest_list.add_argument("--within", type=int, metavar="HOURS", help="Only the last N hours")
    guest_auth = guest_actions.add_parser("authorize", help="Authorize a guest device")
    guest_auth.add_argument("mac", help="Guest MAC address")
    guest_auth.add_argument("--minutes", type=int, help="Authorization duration")
    guest_auth.add_argument("--up", type=int, metavar="KBPS", help="Upload limit")
    guest_auth.add_argument("--down", type=int, metavar="KBPS", help="Download limit")
    guest_auth.add_argument("--quota-mb", type=int, metavar="MB", help="Data quota")
    guest_auth.add_argument("--ap-mac", help="MAC of the AP the guest is connected to")
    guest_unauth = guest_actions.add_parser("unauthorize", help="Revoke a guest's access")
    guest_unauth.add_argument("mac", help="Guest MAC address")
    guest_unauth_all = guest_actions.add_parser(
        "unauthorize-all", help="Revoke access for every listed guest"
    )
    guest_unauth_all.add_argument("--yes", action="store_true", help="Confirm the bulk action")

    vouchers = commands.add_parser("vouchers", help="Hotspot vouchers")
    voucher_actions = vouchers.add_subparsers(dest="action", metavar="ACTION", required=True)
    voucher_actions.add_parser("list", help="List vouchers")
    voucher_create = voucher_actions.add_parser("create", help="Create vouchers")
    voucher_create.add_argument("--count", type=int, default=1, help="Number of vouchers")
    voucher_create.add_argument("--minutes", type=int, required=True, help="Validity after use")
    voucher_create.add_argument("--note", help="Note stored with each voucher")
    voucher_create.add_argument("--up", type=int, metavar="KBPS", help="Upload limit")
    voucher_create.add_argument("--down", type=int, metavar="KBPS", help="Download limit")
    voucher_create.add_argument("--quota-mb", type=int, metavar="MB", help="Data quota")
    voucher_create.add_argument("--uses", type=int, help="Allowed uses (0 = unlimited)")
    voucher_delete = voucher_actions.add_parser("delete", help="Delete a voucher")
    voucher_delete.add_argument("voucher_id", help="Voucher _id")
    voucher_delete_all = voucher_actions.add_parser("delete-all", help="Delete every voucher")
    voucher_delete_all.add_argument("--yes", action="store_true", help="Confirm the bulk action")

    sites = commands.add_parser("sites", help="Sites")
    site_actions = sites.add_subparsers(dest="action", metavar="ACTION", required=True)
    site_actions.add_parser("list", help="List visible sites")
    site_actions.add_parser("stats", help="Health statistics for the current site")

    return parser


def _format_timestamp(value: Optional[int]) -> str:
    if not value:
        return "-"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


def _emit(items: Iterable[BaseModel], as_json: bool, render: Any) -> None:
    items = list(items)
    if as_json:
        print(json.dumps([item.model_dump(mode="json", by_alias=True) for item in items], indent=2))
        return
    if not items:
        print("(none)")
    for item in items:
        print(render(item))


def _render_guest(guest: Any) -> str:
    state = "expired" if guest.is_expired else "active"
    if guest.was_unauthorized:
        state = "unauthorized"
    return f"{guest.mac}  {state:<12}  until {_format_timestamp(guest.expires_at)}"


def _render_voucher(voucher: Any) -> str:
    note = f"  {voucher.note}" if voucher.note else ""
    return f"{voucher.code}  {voucher.status.value:<13}  {voucher.duration} min  id={voucher.id}{note}"


def _render_site(site: Any) -> str:
    return f"{site.name:<12}  {site.desc}  id={site.id}"


def _render_stats(stats: Any) -> str:
    lines = [
        f"Access points: {stats.num_ap}",
        f"Users:         {stats.num_user}",
        f"Guests:        {stats.num_guest}",
    ]
    for subsystem in stats.subsystems or []:
        lines.append(f"  {subsystem.subsystem:<6} {subsystem.status or '-'}")
    return "\n".join(lines)


def print_banner(client: "UnifiClient") -> None:
    """Print a short summary of the connected controller."""
    lines = [
        "",
        f"UniFi Client v{__version__}",
        "=" * 40,
        f"Controller: {client.controller_kind.value}",
        f"API base:   {client.api_base_url}",
        f"Site:       {client.site}",
        "=" * 40,
    ]
    print("\n".join(lines))


async def run_command(
    args: argparse.Namespace,
    settings: "UnifiSettings",
    transport: Optional["httpx.AsyncBaseTransport"] = None,
) -> int:
    """Connect and execute the parsed command.

    Returns:
        Exit code.

    Raises:
        UnifiError: Any client error; ``main`` maps it to an exit code.
    """
    from unifi_client.api import UnifiClient

    async with await UnifiClient.build(settings, transport=transport) as client:
        if args.test:
            print_banner(client)
            site = await client.sites().get_by_name(client.site)
            print(f"Site '{site.name}' found ({site.desc or 'no description'})")
            print("Configuration and connection: OK")
            return EXIT_SUCCESS

        resource, action = args.resource, args.action

        if resource == "guests":
            guests = client.guests()
            if action == "list":
                _emit(await guests.list(within_hours=args.within), args.json, _render_guest)
            elif action == "authorize":
                kwargs = {}
                if args.ap_mac:
                    kwargs["access_point_mac_address"] = args.ap_mac
                guest = await guests.authorize(
                    args.mac,
                    duration_minutes=args.minutes,
                    upload_speed_limit_kbps=args.up,
                    download_speed_limit_kbps=args.down,
                    data_quota_megabytes=args.quota_mb,
                    **kwargs,
                )
                _emit([guest], args.json, _render_guest)
            elif action == "unauthorize":
                await guests.unauthorize(args.mac)
                print(f"Unauthorized {args.mac.lower()}")
            elif action == "unauthorize-all":
                if not args.yes:
                    print("Refusing to unauthorize every guest without --yes", file=sys.stderr)
                    return EXIT_CONFIG_ERROR
                print(f"Unauthorized {await guests.unauthorize_all()} guest(s)")

        elif resource == "vouchers":
            vouchers = client.vouchers()
            if action == "list":
                _emit(await vouchers.list(), args.json, _render_voucher)
            elif action == "create":
                created = await vouchers.create(
                    count=args.count,
                    minutes=args.minutes,
                    note=args.note,
                    up=args.up,
                    down=args.down,
                    mb_quota=args.quota_mb,
                    quota=args.uses,
                )
                _emit(created, args.json, _render_voucher)
            elif action == "delete":
                await vouchers.delete(args.voucher_id)
                print(f"Deleted voucher {args.voucher_id}")
            elif action == "delete-all":
                if not args.yes:
                    print("Refusing to delete every voucher without --yes", file=sys.stderr)
                    return EXIT_CONFIG_ERROR
                print(f"Deleted {await vouchers.delete_all()} voucher(s)")

        elif resource == "sites":
            sites = client.sites()
            if action == "list":
                _emit(await sites.list(), args.json, _render_site)
            elif action == "stats":
                _emit([await sites.stats()], args.json, _render_stats)

    return EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for unifi-client.

    Returns:
        Exit code (0=success, 1=config/API error, 2=connection error, 3=auth error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.test and args.resource is None:
        parser.print_help(sys.stderr)
        return EXIT_CONFIG_ERROR

    from unifi_client.config import ConfigurationError, load_config
    from unifi_client.exceptions import (
        AuthenticationError,
        HttpError,
        NotAuthenticatedError,
        UnifiError,
    )
    from unifi_client.logging import configure_logging, get_logger

    overrides = {"site": args.site} if args.site else {}
    try:
        config = load_config(args.config, **overrides)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(log_format=config.log_format, log_level=config.log_level)
    log = get_logger()

    try:
        return asyncio.run(run_command(args, config))
    except HttpError as e:
        log.error("connection_failed", error=e.message)
        print(f"\nConnection error: {e}", file=sys.stderr)
        return EXIT_CONNECTION_ERROR
    except (AuthenticationError, NotAuthenticatedError) as e:
        log.error("authentication_failed", error=e.message)
        print(f"\nAuthentication error: {e}", file=sys.stderr)
        return EXIT_AUTH_ERROR
    except UnifiError as e:
        log.error("command_failed", error=e.message)
        print(f"\nError: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        log.info("shutdown", reason="keyboard interrupt")
        return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
