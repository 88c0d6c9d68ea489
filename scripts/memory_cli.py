#!/usr/bin/env python3
"""
Operations CLI for the local vector memory store.

Usage:
    python scripts/memory_cli.py add "some text" --group session-1
    python scripts/memory_cli.py search "query" --group session-1 --limit 3
    python scripts/memory_cli.py scan ./my-project --group my-project
"""

import argparse
import json
import sys
from pathlib import Path

# Allow running from a source checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from vecmem.core.config import validate_config, debug_enabled
from vecmem.core.engine import MemoryEngine
from vecmem.core.errors import VectorMemoryError
from vecmem.core.scanner import ProjectScanner
from vecmem.util.logging import logger


def build_parser():
    parser = argparse.ArgumentParser(description="Local vector memory operations")
    parser.add_argument(
        "--store",
        default=None,
        help="Store directory (default: VECMEM_STORE_PATH or ./data/vector-store)"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Store a text")
    add_parser.add_argument("text")
    add_parser.add_argument("--group", required=True, help="Group (session) id")

    search_parser = subparsers.add_parser("search", help="Find similar entries")
    search_parser.add_argument("query")
    search_parser.add_argument("--group", default=None, help="Restrict to one group")
    search_parser.add_argument("--limit", type=int, default=None)
    search_parser.add_argument(
        "--frozen",
        action="store_true",
        help="Do not update model statistics with the query"
    )

    list_parser = subparsers.add_parser("list", help="List entries of a group")
    list_parser.add_argument("--group", required=True)

    delete_parser = subparsers.add_parser("delete-group", help="Remove every entry of a group")
    delete_parser.add_argument("group")

    clear_parser = subparsers.add_parser("clear", help="Remove every entry")
    clear_parser.add_argument("--force", action="store_true", help="Skip confirmation")

    subparsers.add_parser("stats", help="Show store statistics")

    scan_parser = subparsers.add_parser("scan", help="Index a project directory")
    scan_parser.add_argument("root")
    scan_parser.add_argument("--group", default="project")

    return parser


def _preview(text: str, length: int = 80) -> str:
    text = " ".join(text.split())
    return text[:length] + "..." if len(text) > length else text


def run(args) -> int:
    engine = MemoryEngine(base_path=args.store)
    engine.initialize()

    if args.command == "add":
        entry_id = engine.add_text(args.text, args.group)
        print(entry_id)

    elif args.command == "search":
        frozen = True if args.frozen else None
        results = engine.find_similar(args.query, group_id=args.group, limit=args.limit, frozen=frozen)
        if not results:
            print("No matches.")
        for rank, result in enumerate(results, start=1):
            print(f"{rank}. [{result.score:.3f}] {result.id} ({result.metadata.get('groupId')}) {_preview(result.content)}")

    elif args.command == "list":
        records = engine.list_group(args.group)
        for record in records:
            print(f"{record.id} {record.metadata.get('createdAt', '')} {_preview(record.content)}")
        print(f"{len(records)} entries in group {args.group}")

    elif args.command == "delete-group":
        removed = engine.delete_group(args.group)
        print(f"✓ Removed {removed} entries from group {args.group}")

    elif args.command == "clear":
        if not args.force:
            response = input("Remove every stored entry? (yes/no): ").strip().lower()
            if response != "yes":
                print("Clear cancelled.")
                return 0
        engine.clear()
        print("✓ Store cleared")

    elif args.command == "stats":
        print(json.dumps(engine.stats(), indent=2))

    elif args.command == "scan":
        report = ProjectScanner(engine).scan(args.root, group_id=args.group)
        print(f"✓ Indexed {report.indexed} files ({report.skipped} skipped, {report.failed} failed)")

    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger.set_debug(debug_enabled())

    for issue in validate_config():
        print(f"WARNING: {issue}")

    try:
        return run(args)
    except (VectorMemoryError, OSError, ValueError) as e:
        print(f"ERROR: {e}")
        logger.error(f"CLI {args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
