"""
Terminal display module using Rich for colored output.
"""

from typing import Callable, Optional, TextIO, Union

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from registry import Candidate, CandidateRegistry, Risk
from scanner import human_size

console = Console()

RISK_STYLES = {
    Risk.LOW: "green",
    Risk.MED: "yellow",
    Risk.HIGH: "red",
}


def _out(out: Optional[Console]) -> Console:
    return out if out is not None else console


def size_label(size_bytes: int) -> str:
    """Human size, or 'unknown' for candidates registered without a measurement."""
    if size_bytes <= 0:
        return "unknown"
    return human_size(size_bytes)


def risk_text(risk: Risk) -> Text:
    return Text(f"[{risk.value} RISK]", style=f"bold {RISK_STYLES[risk]}")


class YesNoConfirm(Confirm):
    """Any answer starting with y/Y is yes; anything else is no."""

    def process_response(self, value: str) -> bool:
        return value.strip().lower().startswith("y")


def confirm(prompt: str, out: Optional[Console] = None, stream: Optional[TextIO] = None) -> bool:
    """Yes/no prompt; empty input means no."""
    return YesNoConfirm.ask(f"  {escape(prompt)}", default=False, console=_out(out), stream=stream)


def print_header(title: str, out: Optional[Console] = None) -> None:
    c = _out(out)
    c.print()
    c.print(Rule(Text(title, style="bold blue"), style="blue", align="left"))


def print_subheader(title: str, out: Optional[Console] = None) -> None:
    c = _out(out)
    c.print()
    c.print(Text(f"  ── {title}", style="bold cyan"))


def print_item(message: Union[str, Text], style: str = "", out: Optional[Console] = None) -> None:
    text = message if isinstance(message, Text) else Text(message, style=style)
    _out(out).print(Text("    ") + text)


def print_ok(message: str, out: Optional[Console] = None) -> None:
    _out(out).print(Text(f"  ✔  {message}", style="green"))


def print_warning(message: str, out: Optional[Console] = None) -> None:
    _out(out).print(Text(f"  ⚠  {message}", style="yellow"))


def print_error(message: str, out: Optional[Console] = None) -> None:
    _out(out).print(Text(f"  ✖  {message}", style="red"))


def _disk_bar(used: int, total: int, width: int = 40) -> str:
    """Return a progress bar string for disk usage."""
    if total <= 0:
        return "-" * width
    ratio = min(used / total, 1.0)
    filled = int(ratio * width)
    return "█" * filled + "░" * (width - filled)


def render_banner(version: str, mode: str, depth: str, dry_run: bool, log_path: str) -> None:
    text = Text()
    text.append("  Mode: ", style="dim")
    text.append(mode, style="bold")
    text.append(" | Scan: ", style="dim")
    text.append(depth, style="bold")
    text.append(" | Dry Run: ", style="dim")
    text.append(str(dry_run).lower(), style="bold")
    text.append(f"\n  Log:  {log_path}\n", style="dim")
    if mode == "audit":
        text.append("  READ-ONLY mode — no files will be modified.", style="green")
    elif dry_run:
        text.append("  DRY-RUN mode — showing what would be cleaned, no changes.", style="yellow")
    else:
        text.append("  CLEANUP mode — you will be prompted before each action.", style="red")

    console.print()
    console.print(
        Panel(
            text,
            title=f"[bold magenta]macOS Disk Space Audit + Safe Cleanup  v{version}[/bold magenta]",
            border_style="magenta",
            padding=(0, 1),
        )
    )


def render_disk_overview(disk: dict, purgeable: Optional[str] = None) -> None:
    """Render the disk overview panel."""
    used = disk["used_bytes"]
    total = disk["total_bytes"]
    free = disk["free_bytes"]
    pct = disk["used_pct"]

    bar = _disk_bar(used, total, width=36)

    # Color the bar: green < 60%, yellow 60-80%, red > 80%
    if pct < 60:
        bar_style = "green"
    elif pct < 80:
        bar_style = "yellow"
    else:
        bar_style = "red"

    text = Text()
    text.append("  Disk Usage: ", style="bold")
    text.append(human_size(used), style="bold white")
    text.append(" used of ", style="dim")
    text.append(human_size(total), style="bold white")
    text.append(" total\n", style="dim")
    text.append("  Free: ", style="bold")
    text.append(human_size(free), style="bold green")
    text.append(f"  ({100 - pct:.0f}% free)\n\n", style="dim")
    text.append("  [", style="dim")
    text.append(bar, style=bar_style)
    text.append(f"]  {pct:.0f}% used", style="dim")
    if purgeable:
        text.append(f"\n  APFS Purgeable Space: {purgeable}", style="dim")

    print_header("FILESYSTEM OVERVIEW")
    console.print(Panel(text, border_style="cyan", padding=(0, 1)))


def render_size_rows(rows: list[dict], title: Optional[str] = None, note: Optional[str] = None) -> None:
    """Two-column size/path table for du and find results."""
    if note:
        print_item(note, style="dim")
    if not rows:
        print_item("Nothing found.", style="dim")
        return

    table = Table(
        title=title,
        box=box.SIMPLE,
        show_header=True,
        header_style="bold blue",
        border_style="bright_black",
        padding=(0, 1),
    )
    table.add_column("Size", justify="right", min_width=10)
    table.add_column("Path", min_width=50)
    for row in rows:
        table.add_row(human_size(row["size_bytes"]), row["path"])
    console.print(table)


def render_labelled_sizes(rows: list[dict]) -> None:
    """System data contributors: size, label, path."""
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold blue", padding=(0, 1))
    table.add_column("Size", justify="right", min_width=10)
    table.add_column("Contributor", min_width=30)
    table.add_column("Path", style="dim")
    for row in rows:
        table.add_row(row["size"], row["label"], row["path"])
    console.print(table)


def render_snapshots(snapshots: Optional[list[str]]) -> None:
    print_subheader("Time Machine Local Snapshots")
    if snapshots is None:
        print_item("tmutil not available", style="dim")
        return
    if not snapshots:
        print_ok("No local snapshots found.")
        return
    print_item(Text.assemble("Found ", (str(len(snapshots)), "bold"), " local snapshot(s)"))
    for name in snapshots[:5]:
        print_item(f"  {name}", style="dim")
    if len(snapshots) > 5:
        print_item(f"  ... and {len(snapshots) - 5} more", style="dim")
    print_item("Note: macOS manages these automatically; deleting frees space immediately.", style="dim")


def render_summary(registry: CandidateRegistry, manual_review: Callable[[str], bool]) -> None:
    """Summary table of all candidates plus per-candidate details."""
    print_header("SUMMARY — SAFE CLEANUP CANDIDATES")

    if not registry:
        console.print()
        print_ok("No significant cleanup candidates found. Your disk is in good shape!")
        return

    candidates = registry.all()
    review_bytes = sum(c.size_bytes for c in candidates if manual_review(c.category))

    console.print()
    print_item(Text(f"Potential space to reclaim: {human_size(registry.total())}", style="bold"))
    if review_bytes:
        print_item(f"(of which {human_size(review_bytes)} needs manual review and is never auto-deleted)", style="dim")
    if any(not c.size_known for c in candidates):
        print_item("(Some items have unknown sizes and are not included in the total)", style="dim")

    table = Table(
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta",
        border_style="bright_black",
        padding=(0, 1),
    )
    table.add_column("#", justify="right", min_width=3)
    table.add_column("Category", style="bold", min_width=28)
    table.add_column("Size", justify="right", min_width=10)
    table.add_column("Risk", min_width=11)
    table.add_column("Path", style="dim")

    for i, c in enumerate(candidates, start=1):
        table.add_row(str(i), c.category, size_label(c.size_bytes), risk_text(c.risk), c.path)

    console.print()
    console.print(table)

    print_subheader("Detailed Commands")
    for c in candidates:
        console.print()
        heading = Text(f"    {c.category}", style="bold")
        heading.append(f" — {size_label(c.size_bytes)} ")
        heading.append_text(risk_text(c.risk))
        console.print(heading)
        console.print(Text.assemble("    ", ("Why safe:", "green"), f" {c.reason}"))
        if c.warning:
            console.print(Text.assemble("    ", ("Warning:", "yellow"), f"  {c.warning}"))
        console.print(Text.assemble("    ", ("Command:", "cyan"), f"  {c.command}"))


def render_next_steps(prog: str, log_path: str, ncdu_installed: bool) -> None:
    print_header("NEXT STEPS")
    console.print()
    print_item("1. Review the candidates above. Focus on LOW-risk items first.")
    print_item(Text.assemble("2. To preview cleanup:  ", (f"{prog} --cleanup --dry-run", "bold")))
    print_item(Text.assemble("3. To clean interactively: ", (f"{prog} --cleanup", "bold")))
    print_item("")
    print_item("Quick wins for most dev Macs:", style="bold")
    for tip in (
        "Empty Trash (always safe)",
        "Xcode DerivedData (rebuilds on next build)",
        "~/Library/Caches (apps rebuild these)",
        "Homebrew cache (brew cleanup --prune=all)",
        "Old .dmg/.pkg installers in ~/Downloads",
        "npm/yarn/pnpm caches",
    ):
        print_item(f"  • {tip}")
    print_item("")
    print_item("For an interactive file-size explorer, consider:", style="dim")
    if ncdu_installed:
        print_item(Text.assemble("  ", ("ncdu is installed!", "green"), " Run: ncdu ~"))
    else:
        print_item("  brew install ncdu && ncdu ~")
    print_item("")
    print_item(f"Log file: {log_path}", style="dim")


def render_cleanup_intro(count: int, dry_run: bool, out: Optional[Console] = None) -> None:
    c = _out(out)
    print_header("INTERACTIVE CLEANUP MODE", out=c)
    if dry_run:
        c.print()
        print_warning("DRY RUN — no files will be modified.", out=c)
    c.print()
    if not count:
        print_ok("No cleanup candidates found. Nothing to do.", out=c)
        return
    print_item(Text.assemble("Found ", (str(count), "bold"), " cleanup categories."), out=c)
    print_item("You will be prompted for each one. Press Ctrl+C to abort at any time.", out=c)
    c.print()


def render_cleanup_candidate(candidate: Candidate, out: Optional[Console] = None) -> None:
    """Everything the operator needs to decide on one candidate."""
    body = Text()
    body.append(f"Size:    {size_label(candidate.size_bytes)}\n")
    body.append("Risk:    ")
    body.append_text(risk_text(candidate.risk))
    body.append(f"\nPath:    {candidate.path}\n")
    body.append(f"Why:     {candidate.reason}")
    if candidate.warning:
        body.append(f"\nWarning: {candidate.warning}", style="yellow")
    body.append(f"\nCommand: {candidate.command}", style="dim")

    _out(out).print(
        Panel(
            body,
            title=Text(candidate.category, style="bold"),
            title_align="left",
            border_style=RISK_STYLES[candidate.risk],
            padding=(0, 1),
        )
    )


def render_disk_lines(title: str, lines: list[str], out: Optional[Console] = None) -> None:
    c = _out(out)
    print_header(title, out=c)
    c.print()
    for line in lines:
        print_item(line, out=c)
