#!/usr/bin/env python3
"""
BLK - Bookmarklet Kit

Command-line interface for storing, sharing and installing bookmarklets.
"""
import sys
import argparse
import json
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from blk.config import BlkConfig, get_config, init_config
from blk.constants import DESCRIPTION_COLUMN_WIDTH, NAME_COLUMN_WIDTH
from blk.controller import Controller, Message, ERROR, INFO, SUCCESS
from blk.errors import BlkError
from blk.models import Bookmarklet
from blk.storage import open_storage
from blk.store import RecordStore
from blk.utils import truncate

logger = logging.getLogger(__name__)


console = Console()

MESSAGE_STYLES = {
    ERROR: "red",
    SUCCESS: "green",
    INFO: "blue",
}


def setup_logging(level: str, verbose: bool = False) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def print_message(message: Optional[Message], quiet: bool = False) -> None:
    """Print a controller message; errors are always shown."""
    if message is None or (quiet and not message.is_error):
        return
    style = MESSAGE_STYLES.get(message.kind, "white")
    console.print(f"[{style}]{escape(message.text)}[/{style}]")


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def output_records(records: List[Bookmarklet], format: str = "table"):
    """Output bookmarklets in the specified format."""
    if format == "table":
        table = Table(title="Bookmarklets")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Description", style="white")
        table.add_column("Updated", style="magenta")

        for r in records:
            table.add_row(
                r.id[:8],
                truncate(r.name, NAME_COLUMN_WIDTH),
                truncate(r.description or "", DESCRIPTION_COLUMN_WIDTH),
                format_timestamp(r.updated_at),
            )

        console.print(table)
    elif format == "json":
        print(json.dumps([r.to_dict() for r in records], indent=2, ensure_ascii=False))
    else:  # plain
        for r in records:
            print(f"{r.id}  {r.name}")
            if r.description:
                print(f"    {r.description}")


def output_details(record: Bookmarklet, share_link: str):
    """Show every field of one bookmarklet."""
    details = Table(show_header=False, box=None)
    details.add_column("Field", style="cyan bold")
    details.add_column("Value", style="white")

    details.add_row("ID", record.id)
    details.add_row("Name", record.name)
    details.add_row("Description", record.description or "(none)")
    details.add_row("Created", format_timestamp(record.created_at))
    details.add_row("Updated", format_timestamp(record.updated_at))
    details.add_row("Share link", share_link)
    details.add_row("Code", record.code)

    console.print(Panel(details, title=record.name, border_style="blue"))


def open_controller(config: BlkConfig) -> Controller:
    """Build the store and controller described by configuration."""
    store = RecordStore(open_storage(config), key=config.storage_key)
    return Controller(store, share_base_url=config.share_base_url)


def resolve_record(controller: Controller, id: str) -> Bookmarklet:
    """Find a record by full id or unique id prefix, exiting if there is none."""
    record = controller.store.get(id)
    if record:
        return record
    matches = [r for r in controller.store.all() if r.id.startswith(id)]
    if len(matches) == 1:
        return matches[0]
    if matches:
        console.print(f"[red]Ambiguous id prefix: {id}[/red]")
    else:
        console.print(f"[red]Bookmarklet not found: {id}[/red]")
    sys.exit(1)


def read_code(args) -> Optional[str]:
    """Code from --code or --file ('-' reads stdin), None if neither was given."""
    if getattr(args, "code", None) is not None:
        return args.code
    if getattr(args, "file", None) == "-":
        return sys.stdin.read()
    if getattr(args, "file", None):
        return Path(args.file).read_text(encoding="utf-8")
    return None


def finish(message: Optional[Message], args) -> None:
    print_message(message, args.quiet)
    if message is not None and message.is_error:
        sys.exit(1)


def cmd_add(args):
    """Add a new bookmarklet."""
    controller = open_controller(get_config())
    controller.form.name = args.name
    controller.form.description = args.description or ""
    controller.form.code = read_code(args) or ""
    finish(controller.save_form(), args)
    if not args.quiet:
        print(controller.store.all()[0].id)


def cmd_list(args):
    """List bookmarklets."""
    controller = open_controller(get_config())
    records = controller.filtered()
    if args.limit:
        records = records[:args.limit]
    output_records(records, args.output)


def cmd_search(args):
    """Search bookmarklets by name and description."""
    controller = open_controller(get_config())
    controller.query = args.query
    records = controller.filtered()
    if not records and args.output == "table":
        console.print("[yellow]No bookmarklets found.[/yellow]")
        return
    output_records(records, args.output)


def cmd_show(args):
    """Show a single bookmarklet."""
    controller = open_controller(get_config())
    record = resolve_record(controller, args.id)
    if args.output == "json":
        print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    else:
        output_details(record, controller.share_link(record))


def cmd_edit(args):
    """Update a bookmarklet's name, description or code."""
    controller = open_controller(get_config())
    record = resolve_record(controller, args.id)
    controller.edit_item(record.id)

    if args.name is not None:
        controller.form.name = args.name
    if args.description is not None:
        controller.form.description = args.description
    code = read_code(args)
    if code is not None:
        controller.form.code = code

    finish(controller.save_form(), args)


def cmd_delete(args):
    """Delete bookmarklets."""
    config = get_config()
    controller = open_controller(config)

    def confirm(prompt: str) -> bool:
        if args.yes or not config.confirm_delete:
            return True
        answer = console.input(f"{prompt} \\[y/N] ")
        return answer.strip().lower() in ("y", "yes")

    failed = False
    for id in args.ids:
        record = resolve_record(controller, id)
        message = controller.delete_item(record.id, confirm)
        if message is None:
            console.print(f"[yellow]Skipped {record.id}[/yellow]")
            continue
        print_message(message, args.quiet)
        failed = failed or message.is_error

    if failed:
        sys.exit(1)


def cmd_share(args):
    """Create or inspect share links."""
    controller = open_controller(get_config())

    if args.share_command == "link":
        record = resolve_record(controller, args.id)
        print(controller.share_link(record))
    elif args.share_command == "inspect":
        message = controller.startup_notice(args.url)
        if message is None:
            finish(Message(ERROR, "Invalid token."), args)
            return
        print_message(message)


def cmd_install(args):
    """Print the link target to bookmark."""
    controller = open_controller(get_config())
    record = resolve_record(controller, args.id)
    print(controller.install_href(record))


def cmd_import(args):
    """Import bookmarklets from a file or a share link."""
    controller = open_controller(get_config())

    if args.token:
        finish(controller.import_from_hash(args.token), args)
    elif args.file == "-":
        finish(controller.import_text(sys.stdin.read()), args)
    elif args.file:
        finish(controller.import_path(Path(args.file), args.format), args)
    else:
        finish(Message(ERROR, "Nothing to import: give a file or --token."), args)


def cmd_export(args):
    """Export bookmarklets."""
    config = get_config()
    controller = open_controller(config)

    if args.file == "-":
        sys.stdout.write(controller.export_all(args.format, config.export_pretty))
        return
    path = Path(args.file) if args.file else None
    finish(controller.export_to(path, args.format, config.export_pretty), args)


def _coerce(current, value: str):
    """Convert a string from the command line to the type of the current setting."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        return int(value)
    return value


def cmd_config(args):
    """Manage configuration."""
    config = get_config()

    if args.action == "show":
        if args.key:
            if not hasattr(config, args.key):
                console.print(f"[red]Unknown config key: {args.key}[/red]")
                sys.exit(1)
            print(getattr(config, args.key))
        else:
            print(json.dumps(asdict(config), indent=2))

    elif args.action == "set":
        if not args.key or args.value is None:
            console.print("[red]Usage: blk config set KEY VALUE[/red]")
            sys.exit(1)
        if not hasattr(config, args.key):
            console.print(f"[red]Unknown config key: {args.key}[/red]")
            sys.exit(1)
        setattr(config, args.key, _coerce(getattr(config, args.key), args.value))
        config.save()
        if not args.quiet:
            console.print(f"[green]Set {args.key} = {args.value}[/green]")

    elif args.action == "init":
        config_path = Path.home() / ".config" / "blk" / "config.toml"
        config.save(config_path)
        console.print(f"[green]Created config at {config_path}[/green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blk",
        description="BLK - Bookmarklet Kit: store, share and install bookmarklets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  blk add "Word count" --code "alert(document.body.innerText.split(/\\s+/).length)"
  blk add "Dark mode" --file dark.js --description "Invert page colors"
  blk list
  blk search dark
  blk show 3f2a
  blk edit 3f2a --name "Dark mode v2"
  blk share link 3f2a
  blk import --token "https://localhost/#eyJuYW1lIjoi..."
  blk export bookmarklets.html --format html
  blk import bookmarklets.json

Configuration:
  Default storage: ./blk.db (SQLite) or from config
  Config file: ~/.config/blk/config.toml or ./blk.toml
  Environment: BLK_DATABASE, BLK_STORAGE_BACKEND, BLK_SHARE_BASE_URL
        """
    )

    # Global options
    parser.add_argument("--db", help="Database file (default: blk.db)")
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("--backend", choices=["sqlite", "json", "memory"], help="Storage backend")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-o", "--output", choices=["table", "json", "plain"],
                        help="Output format")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    add_parser = subparsers.add_parser("add", help="Add a bookmarklet")
    add_parser.add_argument("name", help="Bookmarklet name")
    add_parser.add_argument("--description", "-d", help="Description")
    add_source = add_parser.add_mutually_exclusive_group()
    add_source.add_argument("--code", "-c", help="JavaScript code or javascript: URL")
    add_source.add_argument("--file", "-f", help="Read code from file ('-' for stdin)")
    add_parser.set_defaults(func=cmd_add)

    list_parser = subparsers.add_parser("list", help="List bookmarklets")
    list_parser.add_argument("--limit", type=int, help="Maximum number to show")
    list_parser.set_defaults(func=cmd_list)

    search_parser = subparsers.add_parser("search", help="Search bookmarklets")
    search_parser.add_argument("query", nargs="?", default="", help="Text to find in name or description")
    search_parser.set_defaults(func=cmd_search)

    show_parser = subparsers.add_parser("show", help="Show a bookmarklet")
    show_parser.add_argument("id", help="Bookmarklet id or unique prefix")
    show_parser.set_defaults(func=cmd_show)

    edit_parser = subparsers.add_parser("edit", help="Update a bookmarklet")
    edit_parser.add_argument("id", help="Bookmarklet id or unique prefix")
    edit_parser.add_argument("--name", "-n", help="New name")
    edit_parser.add_argument("--description", "-d", help="New description")
    edit_source = edit_parser.add_mutually_exclusive_group()
    edit_source.add_argument("--code", "-c", help="New code")
    edit_source.add_argument("--file", "-f", help="Read new code from file")
    edit_parser.set_defaults(func=cmd_edit)

    delete_parser = subparsers.add_parser("delete", help="Delete bookmarklets")
    delete_parser.add_argument("ids", nargs="+", help="Bookmarklet ids or unique prefixes")
    delete_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    delete_parser.set_defaults(func=cmd_delete)

    share_parser = subparsers.add_parser("share", help="Share links")
    share_subparsers = share_parser.add_subparsers(dest="share_command", required=True)
    share_link = share_subparsers.add_parser("link", help="Print the share link for a bookmarklet")
    share_link.add_argument("id", help="Bookmarklet id or unique prefix")
    share_inspect = share_subparsers.add_parser("inspect", help="Check a share link without importing it")
    share_inspect.add_argument("url", help="Share link, #fragment or token")
    share_parser.set_defaults(func=cmd_share)

    install_parser = subparsers.add_parser("install", help="Print the link target to bookmark")
    install_parser.add_argument("id", help="Bookmarklet id or unique prefix")
    install_parser.set_defaults(func=cmd_install)

    import_parser = subparsers.add_parser("import", help="Import bookmarklets")
    import_parser.add_argument("file", nargs="?", help="File to import ('-' for stdin JSON)")
    import_parser.add_argument("--format", choices=["json", "html"],
                               help="Force format (auto-detected by default)")
    import_parser.add_argument("--token", "-t", help="Share link or token to import")
    import_parser.set_defaults(func=cmd_import)

    export_parser = subparsers.add_parser("export", help="Export bookmarklets")
    export_parser.add_argument("file", nargs="?", help="Output file (default: bookmarklets.json, '-' for stdout)")
    export_parser.add_argument("--format", choices=["json", "html", "markdown"], default="json",
                               help="Export format (html imports into a browser's bookmarks)")
    export_parser.set_defaults(func=cmd_export)

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "set", "init"], help="Config action")
    config_parser.add_argument("key", nargs="?", help="Config key")
    config_parser.add_argument("value", nargs="?", help="Config value (for set)")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config_args = {}
    if args.output:
        config_args["output_format"] = args.output
    if args.backend:
        config_args["storage_backend"] = args.backend

    config_file = Path(args.config) if args.config else None
    get_config(reload=True, config_file=config_file)
    config = init_config(
        database=args.db,
        config_file=config_file,
        **config_args
    )
    setup_logging(config.log_level, args.verbose)

    if not args.output:
        args.output = config.output_format
    if not config.color_output:
        console.no_color = True

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except (BlkError, OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
