import argparse
import logging
import sys
from pathlib import Path

from shortlink.adapters.local_identity import DEFAULT_IDENTITY_PATH, LocalIdentity
from shortlink.app_shell.config import DEFAULT_RULES_PATH
from shortlink.app_shell.context import ServiceContext
from shortlink.components.shortlinks import (
    CreateLinkInput,
    DeleteLinkInput,
    EditLimitInput,
    LinkValidationError,
    ListLinksInput,
    OpenLinkInput,
    run_bulk_delete_mine,
    run_cleanup,
    run_create,
    run_delete,
    run_edit_limit,
    run_list,
    run_open,
)
from shortlink.domain.entities import LinkStatus, ShortLink
from shortlink.ports.filestore import JsonStoreError
from shortlink.rules.loader import dump_rules, load_or_create_rules

logger = logging.getLogger("cli")


def parse_limit(value: str) -> int | None:
    """'unlimited' (or '-') means no limit, anything else must be an integer."""
    if value.strip().lower() in ("unlimited", "-", "none"):
        return None
    try:
        return int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid limit: {value!r}") from e


def parse_status(value: str) -> LinkStatus | None:
    name = value.strip().upper()
    if name == "ALL":
        return None
    try:
        return LinkStatus(name)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"unknown status: {value!r}") from e


def report_errors(errors: tuple[LinkValidationError, ...] | list[LinkValidationError]) -> int:
    for error in errors:
        print(f"Error [{error.code}]: {error.message}", file=sys.stderr)
    return 1


def format_link(link: ShortLink, base_url: str) -> str:
    expires = link.expires_at.strftime("%Y-%m-%d %H:%M") if link.expires_at else "-"
    return (
        f"{base_url}{link.short_code}  {link.status.value:<13}  "
        f"{link.click_count}/{link.limit_label}  expires {expires}  {link.long_url}"
    )


# --- Handlers ---


def handle_create(ctx: ServiceContext, args: argparse.Namespace) -> int:
    result = run_create(CreateLinkInput(long_url=args.url, click_limit=args.limit), ctx.links)
    if not result.success:
        return report_errors(result.errors)
    print(result.message)
    return 0


def handle_list(ctx: ServiceContext, args: argparse.Namespace) -> int:
    result = run_list(
        ListLinksInput(status=args.status, query=args.query, sort=args.sort), ctx.links
    )
    if result.total == 0:
        print("No links.")
        return 0
    for link in result.links:
        print(format_link(link, ctx.rules.links.base_url))
    print(f"Total: {result.total}")
    return 0


def handle_show(ctx: ServiceContext, args: argparse.Namespace) -> int:
    link = ctx.links.find_by_short_code(args.code)
    if link is None:
        print(f"Link not found: {ctx.links.normalize_code(args.code)}", file=sys.stderr)
        return 1
    print(f"ID:          {link.id}")
    print(f"Short URL:   {ctx.links.short_url(link)}")
    print(f"Long URL:    {link.long_url}")
    print(f"Owner:       {link.owner_uuid}")
    print(f"Status:      {link.status.value}")
    print(f"Clicks:      {link.click_count}/{link.limit_label}")
    print(f"Created:     {link.created_at}")
    print(f"Expires:     {link.expires_at}")
    print(f"Last access: {link.last_access_at or '-'}")
    return 0


def handle_open(ctx: ServiceContext, args: argparse.Namespace) -> int:
    result = run_open(OpenLinkInput(code=args.code), ctx.links)
    print(result.message, file=sys.stdout if result.counted else sys.stderr)
    return 0 if result.counted else 1


def handle_edit_limit(ctx: ServiceContext, args: argparse.Namespace) -> int:
    result = run_edit_limit(EditLimitInput(code=args.code, new_limit=args.value), ctx.links)
    if not result.success:
        return report_errors(result.errors)
    print(result.message)
    return 0


def handle_delete(ctx: ServiceContext, args: argparse.Namespace) -> int:
    if not args.yes:
        print("Refusing to delete without --yes.", file=sys.stderr)
        return 1
    result = run_delete(DeleteLinkInput(code=args.code), ctx.links)
    if not result.success:
        return report_errors(result.errors)
    print(result.message)
    return 0


def handle_cleanup(ctx: ServiceContext, args: argparse.Namespace) -> int:
    both = not args.expired and not args.limit_reached
    if both:
        result = run_cleanup(ctx.links)
        print(f"Expired: {result.expired}, limit reached: {result.limit_reached}")
        return 0
    if args.expired:
        print(f"Expired: {ctx.links.cleanup_expired()}")
    if args.limit_reached:
        print(f"Limit reached: {ctx.links.cleanup_limit_reached()}")
    return 0


def handle_bulk_delete(ctx: ServiceContext, args: argparse.Namespace) -> int:
    both = not args.expired and not args.limit_reached
    if both:
        result = run_bulk_delete_mine(ctx.links)
        print(f"Deleted {result.total} link(s): {result.expired} expired, "
              f"{result.limit_reached} limit reached")
        return 0
    if args.expired:
        print(f"Deleted expired: {ctx.links.bulk_delete_expired_mine()}")
    if args.limit_reached:
        print(f"Deleted limit reached: {ctx.links.bulk_delete_limit_reached_mine()}")
    return 0


def handle_stats(ctx: ServiceContext, args: argparse.Namespace) -> int:
    stats = ctx.links.stats_global(args.top) if args.global_ else ctx.links.stats_mine(args.top)
    print(f"Total: {stats.total}")
    print(f"Active: {stats.active}")
    print(f"Expired: {stats.expired}")
    print(f"Limit reached: {stats.limit_reached}")
    print(f"Deleted: {stats.deleted}")
    print(f"Total clicks: {stats.total_clicks}")
    if stats.top_by_clicks:
        print("Top by clicks:")
        for link in stats.top_by_clicks:
            print(f"  {ctx.links.short_url(link)}  {link.click_count}  {link.long_url}")
    return 0


def handle_export(ctx: ServiceContext, args: argparse.Namespace) -> int:
    path = ctx.links.export_my_links()
    if path is None:
        print("Export failed.", file=sys.stderr)
        return 1
    print(f"Exported to {path}")
    return 0


def handle_validate(ctx: ServiceContext, args: argparse.Namespace) -> int:
    report = ctx.links.validate_store(ctx.users.known_uuids())
    print(f"Links checked: {report.total_links}, issues: {report.issues}")
    for message in report.messages:
        print(f"  - {message}")
    return 1 if report.issues else 0


def handle_events(ctx: ServiceContext, args: argparse.Namespace) -> int:
    if not ctx.events.enabled:
        print("Event log is disabled.")
        return 0
    events = ctx.events.recent_by_owner(ctx.users.current_uuid, args.limit)
    if not events:
        print("No events.")
        return 0
    for event in events:
        print(
            f"{event.ts:%Y-%m-%d %H:%M:%S}  {event.type.value:<13}  "
            f"{event.short_code or '-'}  {event.message}"
        )
    return 0


def handle_whoami(ctx: ServiceContext, args: argparse.Namespace) -> int:
    print(ctx.users.current_uuid)
    return 0


def handle_users(ctx: ServiceContext, args: argparse.Namespace) -> int:
    if args.users_command == "list":
        current = ctx.users.current_uuid
        for user in ctx.users.list_all():
            marker = "*" if user.uuid == current else " "
            print(f"{marker} {user.uuid}  last seen {user.last_seen_at}")
        return 0

    if args.users_command == "new":
        new_uuid = ctx.new_user()
    else:
        if not ctx.switch_user(args.uuid):
            print("UUID must not be blank.", file=sys.stderr)
            return 1
        new_uuid = ctx.users.current_uuid

    if not ctx.users.make_current_default():
        print("Warning: could not persist the current user.", file=sys.stderr)
    print(f"Current user: {new_uuid}")
    return 0


def handle_settings(ctx: ServiceContext, args: argparse.Namespace) -> int:
    print(dump_rules(ctx.rules), end="")
    return 0


HANDLERS = {
    "create": handle_create,
    "list": handle_list,
    "show": handle_show,
    "open": handle_open,
    "edit-limit": handle_edit_limit,
    "delete": handle_delete,
    "cleanup": handle_cleanup,
    "bulk-delete": handle_bulk_delete,
    "stats": handle_stats,
    "export": handle_export,
    "validate": handle_validate,
    "events": handle_events,
    "whoami": handle_whoami,
    "users": handle_users,
    "settings": handle_settings,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shortlink", description="Short link manager")
    parser.add_argument("--rules", type=Path, default=DEFAULT_RULES_PATH, help="Rules file")
    parser.add_argument("--data-dir", type=Path, help="Override storage.data_dir")
    parser.add_argument(
        "--identity", type=Path, default=DEFAULT_IDENTITY_PATH, help="Current user uuid file"
    )
    parser.add_argument(
        "--no-browser", action="store_true", help="Never launch a browser on open"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # create
    create_parser = subparsers.add_parser("create", help="Create a short link")
    create_parser.add_argument("url", help="Target http(s) URL")
    create_parser.add_argument("--limit", type=int, help="Click limit (default from rules)")

    # list
    list_parser = subparsers.add_parser("list", help="List my links")
    list_parser.add_argument("--status", type=parse_status, help="ALL, ACTIVE, EXPIRED, ...")
    list_parser.add_argument("--query", help="Substring of short code or URL")
    list_parser.add_argument(
        "--sort", choices=["created", "clicks", "expires"], default="created"
    )

    # show / open
    show_parser = subparsers.add_parser("show", help="Show one link")
    show_parser.add_argument("code")
    open_parser = subparsers.add_parser("open", help="Open a short link")
    open_parser.add_argument("code")

    # edit-limit
    edit_parser = subparsers.add_parser("edit-limit", help="Change a link's click limit")
    edit_parser.add_argument("code")
    edit_parser.add_argument("value", type=parse_limit, help="Positive integer or 'unlimited'")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete one of my links")
    delete_parser.add_argument("code")
    delete_parser.add_argument("--yes", action="store_true", help="Confirm deletion")

    # cleanup / bulk-delete
    for name, help_text in (
        ("cleanup", "Run the global cleanup sweeps"),
        ("bulk-delete", "Hard-delete my expired / limit-reached links"),
    ):
        sweep_parser = subparsers.add_parser(name, help=help_text)
        sweep_parser.add_argument("--expired", action="store_true")
        sweep_parser.add_argument("--limit-reached", action="store_true")

    # stats
    stats_parser = subparsers.add_parser("stats", help="Link statistics")
    stats_parser.add_argument("--global", dest="global_", action="store_true")
    stats_parser.add_argument("--top", type=int, default=5)

    subparsers.add_parser("export", help="Export my links to JSON")
    subparsers.add_parser("validate", help="Check stored links for integrity issues")

    events_parser = subparsers.add_parser("events", help="Show my recent events")
    events_parser.add_argument("--limit", type=int, default=20)

    subparsers.add_parser("whoami", help="Print the current user uuid")

    # users
    users_parser = subparsers.add_parser("users", help="Manage local users")
    users_sub = users_parser.add_subparsers(dest="users_command", required=True)
    users_sub.add_parser("list", help="List known users")
    users_sub.add_parser("new", help="Create a new user and make it current")
    switch_parser = users_sub.add_parser("switch", help="Switch the current user")
    switch_parser.add_argument("uuid")

    subparsers.add_parser("settings", help="Print the effective rules")
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        rules = load_or_create_rules(args.rules)
    except ValueError as e:
        logger.error("Invalid rules file %s: %s", args.rules, e)
        return 1

    try:
        ctx = ServiceContext.create(
            rules,
            data_dir=args.data_dir,
            identity=LocalIdentity(args.identity),
            headless=args.no_browser,
        )
    except JsonStoreError as e:
        logger.error("Cannot load data: %s", e)
        return 1

    return HANDLERS[args.command](ctx, args)


if __name__ == "__main__":
    sys.exit(main())
