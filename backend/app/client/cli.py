"""
weekly-groceries - terminal view of the couple's list for the current week.

Usage examples:
  weekly-groceries show
  weekly-groceries add "Bananas" --category Produce --quantity "2 bunches"
  weekly-groceries toggle 12
  weekly-groceries remove 12
  weekly-groceries --offline shell

Flags:
  --env-file PATH
    Load environment variables from PATH before reading GROCERY_* settings.
  --api-url URL
    Base URL of the grocery API (default: GROCERY_API_URL or http://localhost:8000).
  --user-id N / --couple-id N
    Identity used for every call (default: GROCERY_USER_ID / GROCERY_COUPLE_ID, then 1).
  --offline
    Skip the API and keep the list in memory for this run.
"""
import argparse
import logging
import os
import shlex
import sys

from dotenv import load_dotenv
from tabulate import tabulate

from app.client.backends import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT_SECONDS,
    GroceryBackend,
    InMemoryGroceryBackend,
    SelectBackend,
    SessionContext,
)
from app.client.board import GroceryBoard

logger = logging.getLogger("grocery.client.cli")


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def BuildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weekly-groceries",
        description="Shared weekly grocery list for two.",
    )
    parser.add_argument("--env-file", default="", help="Load environment variables from this file.")
    parser.add_argument("--api-url", default=None, help="Base URL of the grocery API.")
    parser.add_argument("--user-id", type=int, default=None)
    parser.add_argument("--couple-id", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT_SECONDS)
    parser.add_argument("--offline", action="store_true", help="Keep the list in memory only.")
    parser.add_argument("-v", "--verbose", action="store_true")

    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("show", help="Show this week's list grouped by category.")
    subparsers.add_parser("categories", help="List categories.")

    add_parser = subparsers.add_parser("add", help="Add an item to this week's list.")
    add_parser.add_argument("name")
    add_parser.add_argument("--category", required=True, help="Category id or name.")
    add_parser.add_argument("--quantity", default=None)

    toggle_parser = subparsers.add_parser("toggle", help="Mark an item done or not done.")
    toggle_parser.add_argument("item_id", type=int)

    remove_parser = subparsers.add_parser("remove", help="Remove an item.")
    remove_parser.add_argument("item_id", type=int)

    subparsers.add_parser("shell", help="Interactive session (keeps offline state between commands).")
    return parser


def BuildContext(args: argparse.Namespace) -> SessionContext:
    user_id = args.user_id if args.user_id is not None else _read_int_env("GROCERY_USER_ID", 1)
    couple_id = args.couple_id if args.couple_id is not None else _read_int_env("GROCERY_COUPLE_ID", 1)
    return SessionContext(UserId=user_id, CoupleId=couple_id)


def BuildBackend(args: argparse.Namespace) -> GroceryBackend:
    if args.offline:
        return InMemoryGroceryBackend()
    base_url = args.api_url or os.getenv("GROCERY_API_URL", "").strip() or DEFAULT_API_URL
    return SelectBackend(base_url, timeout_seconds=args.timeout)


def RenderCategories(board: GroceryBoard) -> str:
    rows = [(entry.Id, entry.Name) for entry in board.Categories]
    return tabulate(rows, headers=["Id", "Category"], tablefmt="github")


def RenderBoard(board: GroceryBoard) -> str:
    lines = []
    if board.CurrentList is not None:
        lines.append(f"Week of {board.CurrentList.WeekStart.isoformat()}")
    if board.IsOffline:
        lines.append("Offline mode: changes are kept in memory only.")
    if board.Error:
        lines.append(f"! {board.Error}")

    grouped = board.ItemsByCategory()
    if not grouped:
        lines.append("No items yet.")
    for category_name, entries in grouped.items():
        rows = [
            (
                entry.Id,
                "x" if entry.IsCompleted else " ",
                entry.Name,
                entry.Quantity or "",
            )
            for entry in entries
        ]
        lines.append("")
        lines.append(f"{category_name} ({len(entries)})")
        lines.append(tabulate(rows, headers=["Id", "Done", "Item", "Quantity"], tablefmt="github"))

    completed, total = board.Summary()
    lines.append("")
    lines.append(f"{completed}/{total} done")
    return "\n".join(lines)


def RunCommand(board: GroceryBoard, args: argparse.Namespace) -> int:
    command = args.command or "show"
    if command == "categories":
        print(RenderCategories(board))
        return 0
    if command == "add":
        category = board.FindCategory(args.category)
        if category is None:
            print(f"Unknown category: {args.category}", file=sys.stderr)
            return 2
        board.AddItem(args.name, category.Id, args.quantity)
    elif command == "toggle":
        board.ToggleItem(args.item_id)
    elif command == "remove":
        board.RemoveItem(args.item_id)
    print(RenderBoard(board))
    return 1 if board.Error else 0


def RunShell(board: GroceryBoard, parser: argparse.ArgumentParser) -> int:
    print(RenderBoard(board))
    while True:
        try:
            raw = input("groceries> ").strip()
        except EOFError:
            print()
            return 0
        if not raw:
            continue
        if raw in {"quit", "exit"}:
            return 0
        try:
            args = parser.parse_args(shlex.split(raw))
        except SystemExit:
            continue
        if args.command == "shell":
            continue
        RunCommand(board, args)


def main(argv: list[str] | None = None) -> int:
    parser = BuildParser()
    args = parser.parse_args(argv)
    if args.env_file:
        if not os.path.exists(args.env_file):
            parser.error(f"Env file not found: {args.env_file}")
        load_dotenv(dotenv_path=args.env_file)
    else:
        load_dotenv()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    board = GroceryBoard(BuildBackend(args), BuildContext(args))
    if not board.Load():
        print(f"! {board.Error}", file=sys.stderr)
        return 1
    if args.command == "shell":
        return RunShell(board, parser)
    return RunCommand(board, args)


if __name__ == "__main__":
    sys.exit(main())
