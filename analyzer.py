#!/usr/bin/env python3
"""
Disk Audit — main CLI entry point.

Usage:
  disk-audit                      # Quick read-only audit
  disk-audit --deep               # Thorough audit
  disk-audit --cleanup --dry-run  # Preview cleanup actions
  disk-audit --cleanup            # Interactive cleanup
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

VERSION = "1.0.0"
PROG = "disk-audit"

HOME = os.path.expanduser("~")


@dataclass(frozen=True)
class RunOptions:
    mode: str = "audit"  # audit | cleanup
    depth: str = "fast"  # fast | deep
    dry_run: bool = False
    top_n: int = 25
    log_path: Optional[str] = None

    @property
    def deep(self) -> bool:
        return self.depth == "deep"


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{value}'")
    if n <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="macOS Disk Space Audit + Safe Cleanup. Read-only unless --cleanup is given.",
        epilog=(
            "Personal content (Documents, Photos, Movies, Music, Desktop) and OS paths "
            "are never touched. All actions are logged."
        ),
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        default=False,
        help="Interactive cleanup mode. Prompts per category (y/N).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Show what --cleanup would do, without doing it (implies --cleanup)",
    )
    # Last of --fast/--deep wins.
    parser.add_argument(
        "--fast",
        dest="depth",
        action="store_const",
        const="fast",
        help="Known hotspots only (default)",
    )
    parser.add_argument(
        "--deep",
        dest="depth",
        action="store_const",
        const="deep",
        help="More exhaustive scan of user space. Slower.",
    )
    parser.add_argument(
        "--top",
        type=_positive_int,
        default=25,
        metavar="N",
        help="Show top N largest files/dirs (default: 25)",
    )
    parser.add_argument(
        "--log",
        default=None,
        metavar="PATH",
        help="Custom log file path (default: ~/Desktop/disk-audit-<timestamp>.log)",
    )
    parser.add_argument("-v", "--version", action="version", version=f"{PROG} v{VERSION}")
    return parser


def parse_options(argv: Optional[list[str]] = None) -> RunOptions:
    args = build_parser().parse_args(argv)
    return RunOptions(
        mode="cleanup" if (args.cleanup or args.dry_run) else "audit",
        depth=args.depth or "fast",
        dry_run=args.dry_run,
        top_n=args.top,
        log_path=args.log,
    )


def run_audit_sections(options: RunOptions, home: str = HOME) -> None:
    """Read-only report sections shown before candidate detection."""
    import display
    import scanner

    display.render_disk_overview(scanner.scan_disk_overview(), scanner.apfs_purgeable())

    display.print_header("TOP-LEVEL DIRECTORY USAGE")
    if options.deep:
        rows = scanner.du_children("/", limit=15)
        display.render_size_rows(rows, note="(Deep scan — measuring top-level directories, may take 1-2 min...)")
        display.print_item("/System  (skipped — OS-managed, SIP protected)", style="dim")
    else:
        rows = [
            {"path": d, "size_bytes": scanner.dir_size_bytes(d)}
            for d in ("/Applications", "/opt", "/usr/local")
            if os.path.isdir(d)
        ]
        display.render_size_rows(rows, note="(Skipping deep top-level scan in fast mode. Use --deep for full breakdown.)")
        display.print_item("/System  (OS-managed, skipped)", style="dim")
        display.print_item("/Library, /Users, /private  (use --deep to measure)", style="dim")

    display.print_header("HOME DIRECTORY BREAKDOWN (~)")
    display.render_size_rows(scanner.du_children(home, limit=20))
    if options.deep:
        display.print_subheader("~/Library Breakdown (often largest)")
        display.render_size_rows(scanner.du_children(os.path.join(home, "Library"), limit=15))

    display.print_header(f"LARGEST FILES IN USER SPACE (top {options.top_n})")
    if options.deep:
        files = scanner.largest_files([home], maxdepth=6, top_n=options.top_n, one_filesystem=True)
        display.render_size_rows(files, note="(Deep scan of ~ — this may take a minute...)")
    else:
        known = [
            os.path.join(home, d)
            for d in ("Downloads", "Desktop", "Documents", "Library/Caches", "Library/Application Support")
        ]
        files = scanner.largest_files(known, maxdepth=4, top_n=options.top_n)
        display.render_size_rows(files, note="(Scanning known locations — use --deep for full scan)")

    display.print_header(f"LARGEST DIRECTORIES IN USER SPACE (top {options.top_n})")
    if options.deep:
        dirs = scanner.largest_dirs([home], top_n=options.top_n)
    else:
        dirs = scanner.largest_dirs(
            [
                os.path.join(home, d)
                for d in (
                    "Library/Caches",
                    "Library/Application Support",
                    "Library/Developer",
                    "Library/Containers",
                    "Library/Group Containers",
                    "Downloads",
                    ".Trash",
                )
            ],
            top_n=options.top_n,
        )
    display.render_size_rows(dirs)

    display.print_header("SYSTEM DATA CONTRIBUTORS")
    display.print_item("(These are common contributors to macOS 'System Data' in storage)", style="dim")
    contributors = [
        (os.path.join(home, "Library/Caches"), "User Caches"),
        (os.path.join(home, "Library/Logs"), "User Logs"),
        ("/Library/Caches", "System Caches"),
        ("/private/var/log", "System Logs"),
        ("/private/var/folders", "Temporary Items"),
        ("/private/var/vm", "Virtual Memory (swap)"),
        (os.path.join(home, "Library/Application Support/MobileSync"), "iOS Backups"),
        (os.path.join(home, "Library/Developer"), "Developer Tools"),
        (os.path.join(home, "Library/Containers"), "App Containers (Sandboxed)"),
        (os.path.join(home, "Library/Group Containers"), "App Group Containers"),
        (os.path.join(home, ".Trash"), "Trash"),
    ]
    display.render_labelled_sizes(
        [
            {"path": path, "label": label, "size": scanner.human_size(scanner.dir_size_bytes(path))}
            for path, label in contributors
            if os.path.isdir(path)
        ]
    )
    display.render_snapshots(scanner.list_local_snapshots())


def run(options: RunOptions, log: logging.Logger, home: str = HOME) -> int:
    """Audit, summarise, then clean up or print next steps. Returns the exit status."""
    import display
    from audit_log import log_path_of
    from categories import is_manual_review
    from cleanup import CleanupAborted, CleanupEngine
    from recommender import detect_candidates
    from registry import CandidateRegistry
    from scanner import command_exists, human_size

    log_path = log_path_of(log) or ""
    log.info("Disk audit v%s | Mode: %s | Scan: %s | Dry Run: %s", VERSION, options.mode, options.depth, options.dry_run)
    display.render_banner(VERSION, options.mode, options.depth, options.dry_run, log_path)

    try:
        run_audit_sections(options, home=home)

        if options.deep:
            display.print_warning("Deep scan enabled. Development directory scan may take 1-2 minutes...")
        display.print_header("CHECKING CLEANUP CANDIDATES")
        registry = CandidateRegistry()
        dev_report = detect_candidates(registry, log, home=home, deep=options.deep)
        display.print_item(f"{len(registry)} candidate(s) found.", style="dim")
        if dev_report:
            nm, venvs = dev_report["node_modules"], dev_report["venvs"]
            if nm["count"]:
                display.print_item(f"{human_size(nm['size_bytes'])} across {nm['count']} node_modules directories")
                display.print_item("Tip: Use 'npx npkill' to interactively remove old node_modules.", style="dim")
            if venvs["count"]:
                display.print_item(f"{human_size(venvs['size_bytes'])} across ~{venvs['count']} virtual environments")

        display.render_summary(registry, is_manual_review)
        log.info("Total reclaimable: %s across %d candidate(s)", human_size(registry.total()), len(registry))

        if options.mode == "cleanup":
            CleanupEngine(registry, log, dry_run=options.dry_run, home=home).run()
        else:
            display.render_next_steps(PROG, log_path, command_exists("ncdu"))
    except CleanupAborted:
        display.console.print(f"\n[dim]Cleanup aborted. Full log: {log_path}[/dim]\n")
        return 130
    except KeyboardInterrupt:
        log.warning("ABORTED by user")
        display.console.print(f"\n[dim]Interrupted. Full log: {log_path}[/dim]\n")
        return 130

    display.console.print(f"\n[dim]Audit complete. Full log: {log_path}[/dim]\n")
    log.info("Run finished")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    from audit_log import LogSinkError, close_log, default_log_path, open_log

    options = parse_options(argv)
    log_path = options.log_path or default_log_path()

    try:
        log = open_log(log_path)
    except LogSinkError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        return run(options, log)
    finally:
        close_log(log)


if __name__ == "__main__":
    sys.exit(main())
