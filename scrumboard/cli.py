"""CLI entry point for the scrum board client.

Usage:
  python -m scrumboard list --project ID [--status COL] [--priority P] [--search TEXT]
  python -m scrumboard move --project ID STORY_ID COLUMN
  python -m scrumboard board --project ID
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .board.models import COLUMN_ORDER
from .board.notifications import TOAST_TIMEOUT
from .config import ClientConfig, load_config
from .exceptions import ConfigError, GatewayError


class ConsoleNotifier:
    """Prints toasts and alerts to stderr."""

    def toast(self, message: str, timeout: float | None = None) -> None:
        print(message, file=sys.stderr)

    async def alert(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrum board client")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--base-url", default=None, help="Backend base URL")
    parser.add_argument("--session-cookie", default=None, help="Session cookie value")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    columns = ", ".join(c.value for c in COLUMN_ORDER)

    list_parser = subparsers.add_parser("list", help="List stories by column")
    list_parser.add_argument("--project", type=int, default=None, help="Project ID")
    list_parser.add_argument("--status", default=None, help=f"Board column ({columns})")
    list_parser.add_argument("--priority", default=None, help="low, medium, high or critical")
    list_parser.add_argument("--search", default=None, help="Text in title or description")

    move_parser = subparsers.add_parser("move", help="Move a story to another column")
    move_parser.add_argument("--project", type=int, default=None, help="Project ID")
    move_parser.add_argument("story_id", type=int, help="Story ID")
    move_parser.add_argument("column", help=f"Target column ({columns})")

    board_parser = subparsers.add_parser("board", help="Open the interactive board")
    board_parser.add_argument("--project", type=int, default=None, help="Project ID")

    return parser


def resolve_config(args) -> ClientConfig:
    config = load_config(Path(args.config) if args.config else None)
    if args.base_url:
        config.base_url = args.base_url
    if args.session_cookie:
        config.session_cookie = args.session_cookie
    if getattr(args, "project", None) is not None:
        config.project_id = args.project
    return config


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = resolve_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if config.project_id is None:
        print("Error: a project ID is required (--project or config project_id)", file=sys.stderr)
        sys.exit(2)

    if args.command == "list":
        sys.exit(asyncio.run(_list_command(args, config)))
    elif args.command == "move":
        sys.exit(asyncio.run(_move_command(args, config)))
    elif args.command == "board":
        _board_command(config)


def _make_gateway(config: ClientConfig):
    from .gateway.http import HttpStoryGateway

    return HttpStoryGateway(config)


async def _list_command(args, config: ClientConfig, gateway=None) -> int:
    from .board.loader import load_board
    from .board.store import BoardStateStore

    gateway = gateway or _make_gateway(config)
    store = BoardStateStore()
    try:
        await load_board(gateway, store, config.project_id)
    except GatewayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if hasattr(gateway, "aclose"):
            await gateway.aclose()

    stories = store.query(status=args.status, priority=args.priority, search_text=args.search)
    for column in COLUMN_ORDER:
        in_column = [s for s in stories if s.status is column]
        if args.status and not in_column:
            continue
        points = sum(s.points for s in in_column)
        print(f"{column.value} ({len(in_column)}, {points} pts)")
        for s in sorted(in_column, key=lambda s: s.id):
            ready = "ready" if s.is_sprint_ready else "not ready"
            print(f"  #{s.id} [{s.priority.value}] {s.title} - {s.points} pts, {ready}")
    return 0


async def _move_command(args, config: ClientConfig, gateway=None, notifier=None) -> int:
    from .board.drag_drop import REASON_NOT_FOUND, DragDropController, DragState
    from .board.loader import load_board
    from .board.store import BoardStateStore

    gateway = gateway or _make_gateway(config)
    notifier = notifier or ConsoleNotifier()
    store = BoardStateStore()
    try:
        await load_board(gateway, store, config.project_id)
        controller = DragDropController(
            store, gateway, notifier, toast_timeout=config.toast_timeout or TOAST_TIMEOUT
        )
        outcome = await controller.drop(args.story_id, args.column)
    except GatewayError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if hasattr(gateway, "aclose"):
            await gateway.aclose()

    if outcome.state is DragState.CONFIRMED:
        print(f"#{outcome.story_id} moved to {outcome.target.value}")
        return 0
    if outcome.reason == REASON_NOT_FOUND:
        print(f"Error: story #{outcome.story_id} is not in project {config.project_id}", file=sys.stderr)
    return 1


def _board_command(config: ClientConfig) -> None:
    from board_tui.app import run_board

    run_board(config)
