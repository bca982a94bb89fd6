"""
Dialogue data verification.

Loads every graph in a directory (compiling ``*.dialog`` scripts first
when asked) and runs the strict validator over each one.

Usage:
    dialogue-verify game/data/dialog
    dialogue-verify game/data/dialog --compile --fail-on-warning

Exit codes:
    0 - All graphs loaded and passed validation
    1 - A graph failed to load or has validation errors
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dialogue_engine.core.config import DialogueConfig
from dialogue_engine.dialog.parser import compile_dialogue_file
from dialogue_engine.dialog.validator import ERROR, WARNING, format_issue, validate_graph
from dialogue_engine.resources.graph_store import GraphStore

logger = logging.getLogger("DialogueVerification")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dialogue-verify",
        description="Load and validate dialogue graphs.",
    )
    parser.add_argument("data_path", type=Path, help="Directory of dialogue graph files")
    parser.add_argument(
        "--compile",
        action="store_true",
        help="Compile *.dialog scripts to JSON before loading",
    )
    parser.add_argument(
        "--fail-on-warning",
        action="store_true",
        help="Treat warnings as failures",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from DialogueConfig)")
    return parser


def verify(data_path: Path, compile_scripts: bool = False, fail_on_warning: bool = False) -> bool:
    """Return True if every graph file loads and validates."""
    ok = True
    if compile_scripts:
        for script in sorted(data_path.glob("*.dialog")):
            try:
                compile_dialogue_file(script)
            except (OSError, ValueError) as e:
                # pydantic's ValidationError is a ValueError
                logger.error(f"Failed to compile {script}: {e}")
                ok = False

    store = GraphStore(data_path, DialogueConfig(data_path=data_path))

    for file_path in sorted(data_path.glob("*.json")):
        if store.load_file(file_path) is None:
            ok = False
    logger.info(f"Loaded {len(store.graph_ids())} dialogue graph(s) from {data_path}.")

    for graph_id in store.graph_ids():
        issues = validate_graph(store.get_graph(graph_id), store.get_variables(graph_id))
        for issue in issues:
            log = logger.error if issue.severity == ERROR else logger.warning
            log(f"{graph_id}: {format_issue(issue)}")
        if any(issue.severity == ERROR for issue in issues):
            ok = False
        if fail_on_warning and any(issue.severity == WARNING for issue in issues):
            ok = False

    return ok


def main(argv: Optional[list[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    config = DialogueConfig(data_path=args.data_path)
    logging.basicConfig(level=args.log_level.upper() if args.log_level else config.log_level)

    if not args.data_path.is_dir():
        logger.error(f"Not a directory: {args.data_path}")
        return 1

    if verify(args.data_path, args.compile, args.fail_on_warning):
        logger.info("VERIFICATION SUCCESSFUL: All dialogue graphs loaded and validated.")
        return 0

    logger.error("VERIFICATION FAILED")
    return 1


if __name__ == "__main__":
    sys.exit(main())
