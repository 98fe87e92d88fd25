"""
`change-review` command line.

Commands
--------
change-review diff ORIGINAL PROPOSED           -- colored unified diff + stats
change-review summary -p TARGET PROPOSED ...   -- change summary and risk level
change-review review  -p TARGET PROPOSED ...   -- stage hunks interactively, then write
change-review review  -p TARGET PROPOSED --auto  -- accept everything non-interactively
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from tqdm import tqdm

from .cli_display import format_summary, setup_logger
from .config import Config
from .diff_display import format_colored_diff, render_unified, review_interactively
from .editing.change_store import PendingChangeStore
from .editing.conflict_resolver import RESOLUTIONS
from .editing.errors import ConflictUnresolvedError, ReviewError
from .editing.file_io import LocalFileSystem
from .editing.watcher import DriftWatcher
from .language import detect_language_from_files, get_language_name

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as exc:
        print(f"Cannot read {path}: {exc}", file=sys.stderr)
        sys.exit(2)


def _build_store(args: argparse.Namespace, cfg: Config) -> tuple[PendingChangeStore, LocalFileSystem]:
    fs = LocalFileSystem(args.root)
    store = PendingChangeStore(writer=fs, reader=fs, context_lines=cfg.CONTEXT_LINES)
    for target, proposed in args.proposal:
        store.propose_change(target, fs.read_text(target), _read(proposed))
    return store, fs


def _prompt_resolution(store: PendingChangeStore, path: str) -> bool:
    """Ask the user to resolve every conflict of *path*. False on abort."""
    while store.has_conflicts(path):
        conflict = store.get_conflicts(path)[0]
        print(f"\n  Conflict in {path}, lines {conflict.start_line}-{conflict.end_line}")
        print("  ── proposed ──")
        print(format_colored_diff("\n".join("+" + l for l in conflict.our_content.splitlines())))
        print("  ── on disk ──")
        print(format_colored_diff("\n".join("-" + l for l in conflict.their_content.splitlines())))
        try:
            choice = input(f"  Resolve with ({'/'.join(RESOLUTIONS)}, blank to skip): ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if not choice:
            return False
        if choice not in RESOLUTIONS:
            print("  Invalid choice.")
            continue
        store.resolve_conflict(path, 0, choice)
    return True


def _accept(store: PendingChangeStore, path: str, interactive: bool) -> bool:
    while True:
        try:
            store.accept_change(path)
            return True
        except ConflictUnresolvedError as exc:
            if not interactive or not _prompt_resolution(store, path):
                print(f"  Skipped {path}: {exc}", file=sys.stderr)
                return False
        except ReviewError as exc:
            print(f"  Failed {path}: {exc}", file=sys.stderr)
            return False


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_diff(args: argparse.Namespace, cfg: Config) -> None:
    """Print the diff between two files."""
    store = PendingChangeStore(context_lines=cfg.CONTEXT_LINES)
    diff = store.generate_diff(args.proposed, _read(args.original), _read(args.proposed))
    text = render_unified(diff)
    if not text:
        print("No changes.")
        return
    print(format_colored_diff(text) if cfg.COLOR and not args.no_color else text)
    print(f"\n  {len(diff.hunks)} hunk(s), +{diff.stats.additions} -{diff.stats.deletions}")


def _cmd_summary(args: argparse.Namespace, cfg: Config) -> None:
    """Show what the proposals would change without touching disk."""
    store, _ = _build_store(args, cfg)
    language = detect_language_from_files(store.paths())
    if language:
        print(f"  Language      : {get_language_name(language)}")
    print(format_summary(store.get_changes_summary(), store.get_changed_files(),
                         cfg.RISK_THRESHOLDS, color=cfg.COLOR))


def _cmd_review(args: argparse.Namespace, cfg: Config) -> None:
    """Review proposals, then write the accepted content."""
    store, fs = _build_store(args, cfg)
    watcher: Optional[DriftWatcher] = None
    if args.watch:
        watcher = DriftWatcher(store, fs, cfg.WATCH_DEBOUNCE_SECONDS)
        watcher.start()

    try:
        if args.auto:
            paths = store.open_paths()
            for path in tqdm(paths, unit="file", desc="Applying"):
                _accept(store, path, interactive=False)
        else:
            decisions = review_interactively(store, store.open_paths())
            for path in store.open_paths():
                decision = decisions.get(path, "accept")
                if decision == "accept":
                    _accept(store, path, interactive=True)
                elif decision == "reject":
                    store.reject_change(path)
    finally:
        if watcher is not None:
            watcher.stop()

    print(format_summary(store.get_changes_summary(), store.get_changed_files(),
                         cfg.RISK_THRESHOLDS, color=cfg.COLOR))


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _add_proposal_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-p", "--proposal", nargs=2, action="append", required=True,
        metavar=("TARGET", "PROPOSED"),
        help="File to change and a file holding its proposed content",
    )
    p.add_argument("--root", default=".",
                   help="Project root that TARGET paths are relative to")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="change-review",
        description="Review proposed file edits hunk by hunk before they are written",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .change_review.yaml config file")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- diff ---
    diff_p = subparsers.add_parser("diff", help="Show a unified diff of two files")
    diff_p.add_argument("original")
    diff_p.add_argument("proposed")
    diff_p.add_argument("--no-color", action="store_true")
    diff_p.set_defaults(func=_cmd_diff)

    # --- summary ---
    summary_p = subparsers.add_parser("summary", help="Summarize proposed changes")
    _add_proposal_args(summary_p)
    summary_p.set_defaults(func=_cmd_summary)

    # --- review ---
    review_p = subparsers.add_parser("review", help="Review and apply proposed changes")
    _add_proposal_args(review_p)
    review_p.add_argument("--auto", action="store_true",
                          help="Accept every change without prompting")
    review_p.add_argument("--watch", action="store_true",
                          help="Detect conflicts while files change on disk")
    review_p.set_defaults(func=_cmd_review)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    cfg = Config.load(args.config)
    setup_logger(os.path.abspath(cfg.LOG_DIR))
    args.func(args, cfg)


if __name__ == "__main__":
    main()
