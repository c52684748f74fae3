"""
Cleanup candidate detectors.

Each check_* function looks at one tool or area, decides whether it is big
enough to be worth reporting, and registers Candidate records. Detectors
never modify anything.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from categories import BROWSER_COMMAND, CATEGORIES, GB, MB, resolve_path
from registry import Candidate, CandidateRegistry, Risk
from scanner import (
    brew_cache_dir,
    command_exists,
    count_unavailable_simulators,
    dir_size_bytes,
    docker_daemon_running,
    find_dirs_named,
    find_files,
    human_size,
    list_local_snapshots,
    sum_file_sizes,
    yarn_cache_dir,
)

HOME = os.path.expanduser("~")


@dataclass
class DetectContext:
    registry: CandidateRegistry
    log: logging.Logger
    home: str = HOME


def _register(ctx: DetectContext, candidate: Candidate) -> None:
    ctx.registry.register(candidate)
    ctx.log.info(
        "CANDIDATE: %s | %s | %s | %s",
        candidate.category,
        human_size(candidate.size_bytes),
        candidate.risk.value,
        candidate.path,
    )


def _first_existing(paths: list[str]) -> Optional[str]:
    for p in paths:
        if p and os.path.isdir(p):
            return p
    return None


def check_category(ctx: DetectContext, category: str) -> Optional[Candidate]:
    """Generic path-and-threshold detector driven by CATEGORIES."""
    entry = CATEGORIES[category]
    path = _first_existing([resolve_path(p, ctx.home) for p in entry["paths"]])
    if path is None:
        return None

    size_bytes = dir_size_bytes(path)
    if size_bytes <= entry["threshold"]:
        return None

    candidate = Candidate(
        category=category,
        size_bytes=size_bytes,
        path=path,
        risk=entry["risk"],
        reason=entry["reason"],
        warning=entry["warning"],
        command=entry["command"].format(home=ctx.home, path=path),
    )
    _register(ctx, candidate)
    return candidate


def check_simulators(ctx: DetectContext) -> Optional[Candidate]:
    if not command_exists("xcrun"):
        return None
    sim_path = os.path.join(ctx.home, "Library", "Developer", "CoreSimulator")
    if not os.path.isdir(sim_path):
        return None
    size_bytes = dir_size_bytes(sim_path)
    if size_bytes <= 1 * GB:
        return None

    unavailable = count_unavailable_simulators()
    if unavailable:
        ctx.log.info("%d unavailable simulator(s) can be safely removed.", unavailable)
    candidate = Candidate(
        category="Xcode Simulators (unavailable)",
        size_bytes=size_bytes,
        path=sim_path,
        risk=Risk.LOW,
        reason="Old simulator runtimes for iOS versions you no longer target.",
        warning="Need to re-download if you target those OS versions again.",
        command="xcrun simctl delete unavailable",
    )
    _register(ctx, candidate)
    return candidate


def check_homebrew(ctx: DetectContext) -> Optional[Candidate]:
    cache = brew_cache_dir()
    if not cache or not os.path.isdir(cache):
        return None
    size_bytes = dir_size_bytes(cache)
    if size_bytes <= 100 * MB:
        return None
    candidate = Candidate(
        category="Homebrew Cache",
        size_bytes=size_bytes,
        path=cache,
        risk=Risk.LOW,
        reason="Downloaded package archives; re-downloaded on install.",
        warning="None. Run 'brew cleanup' for a targeted approach.",
        command="brew cleanup --prune=all",
    )
    _register(ctx, candidate)
    return candidate


def check_docker(ctx: DetectContext) -> Optional[Candidate]:
    """Docker prune has no pre-measured footprint; it registers with size 0."""
    if not docker_daemon_running():
        return None
    candidate = Candidate(
        category="Docker (prune)",
        size_bytes=0,
        path="docker system",
        risk=Risk.HIGH,
        reason="Remove unused Docker images, containers, and build cache.",
        warning="DESTROYS unused containers, images, and potentially volumes with data.",
        command="docker system prune -a  # Add --volumes only if you're sure",
    )
    _register(ctx, candidate)
    return candidate


def check_yarn(ctx: DetectContext) -> Optional[Candidate]:
    path = _first_existing(
        [
            yarn_cache_dir() or "",
            os.path.join(ctx.home, "Library", "Caches", "Yarn"),
            os.path.join(ctx.home, ".cache", "yarn"),
        ]
    )
    if path is None:
        return None
    size_bytes = dir_size_bytes(path)
    if size_bytes <= 100 * MB:
        return None
    candidate = Candidate(
        category="Yarn Cache",
        size_bytes=size_bytes,
        path=path,
        risk=Risk.LOW,
        reason="Yarn package cache; re-downloaded as needed.",
        warning="Slightly slower first yarn install.",
        command="yarn cache clean",
    )
    _register(ctx, candidate)
    return candidate


def check_chromium_browser(ctx: DetectContext, category: str, cache_rel: str, profile_rel: str) -> Optional[Candidate]:
    """Chrome and Brave keep a cache dir plus a per-profile cache."""
    cache = os.path.join(ctx.home, cache_rel)
    profile = os.path.join(ctx.home, profile_rel)
    if not os.path.isdir(cache) and not os.path.isdir(profile):
        return None

    size_bytes = dir_size_bytes(cache) + dir_size_bytes(os.path.join(profile, "Default", "Cache"))
    if size_bytes <= 200 * MB:
        return None
    candidate = Candidate(
        category=category,
        size_bytes=size_bytes,
        path=cache,
        risk=Risk.LOW,
        reason="Browser cache files; rebuilt as you browse.",
        warning="Websites load slightly slower on first visit. Sessions/logins preserved.",
        command=BROWSER_COMMAND.format(cache=cache, profile=profile),
    )
    _register(ctx, candidate)
    return candidate


def check_downloads(ctx: DetectContext) -> list[Candidate]:
    """Installers and large archives sitting in ~/Downloads."""
    dl_path = os.path.join(ctx.home, "Downloads")
    if not os.path.isdir(dl_path):
        return []

    found = []
    dmg_total = sum_file_sizes(find_files(dl_path, "*.dmg"))
    if dmg_total > 50 * MB:
        found.append(
            Candidate(
                category="DMG Installers",
                size_bytes=dmg_total,
                path=os.path.join(dl_path, "*.dmg"),
                risk=Risk.LOW,
                reason="Disk image installers; already installed or no longer needed.",
                warning="Re-download from vendor if needed.",
                command=f"find '{dl_path}' -maxdepth 2 -iname '*.dmg' -delete",
            )
        )

    pkg_total = sum_file_sizes(find_files(dl_path, "*.pkg"))
    if pkg_total > 50 * MB:
        found.append(
            Candidate(
                category="PKG Installers",
                size_bytes=pkg_total,
                path=os.path.join(dl_path, "*.pkg"),
                risk=Risk.LOW,
                reason="Package installers; typically not needed after installation.",
                warning="Re-download from vendor if needed.",
                command=f"find '{dl_path}' -maxdepth 2 -iname '*.pkg' -delete",
            )
        )

    zip_total = sum_file_sizes(find_files(dl_path, "*.zip", min_size_mb=100))
    if zip_total > 100 * MB:
        found.append(
            Candidate(
                category="Large ZIPs in Downloads",
                size_bytes=zip_total,
                path=os.path.join(dl_path, "*.zip (>100MB)"),
                risk=Risk.MED,
                reason="Large archive files in Downloads; review before deleting.",
                warning="May contain important files. Review individually.",
                command=f"find '{dl_path}' -maxdepth 2 -iname '*.zip' -size +100M",
            )
        )

    for candidate in found:
        _register(ctx, candidate)
    return found


def check_time_machine(ctx: DetectContext) -> Optional[Candidate]:
    """Snapshot sizes need root to measure, so these register with size 0."""
    snapshots = list_local_snapshots()
    if not snapshots:
        return None
    candidate = Candidate(
        category="Time Machine Snapshots",
        size_bytes=0,
        path="/ (local snapshots)",
        risk=Risk.MED,
        reason="Local Time Machine snapshots; macOS auto-manages but they can be large.",
        warning="Requires sudo. May lose point-in-time recovery for those dates.",
        command="sudo tmutil deletelocalsnapshots <date>  # or: sudo tmutil thinlocalsnapshots / 9999999999 4",
    )
    _register(ctx, candidate)
    return candidate


def report_dev_directories(ctx: DetectContext) -> dict:
    """Deep mode only: node_modules and virtualenv totals. Reported, never registered."""
    node_dirs = find_dirs_named(ctx.home, ["node_modules"])
    venv_dirs = sorted({os.path.dirname(p) for p in find_dirs_named(ctx.home, ["pyvenv.cfg"])})[:50]
    report = {
        "node_modules": {"count": len(node_dirs), "size_bytes": sum(dir_size_bytes(d) for d in node_dirs)},
        "venvs": {"count": len(venv_dirs), "size_bytes": sum(dir_size_bytes(d) for d in venv_dirs)},
    }
    ctx.log.info(
        "node_modules: %s across %d dirs; virtualenvs: %s across %d",
        human_size(report["node_modules"]["size_bytes"]),
        report["node_modules"]["count"],
        human_size(report["venvs"]["size_bytes"]),
        report["venvs"]["count"],
    )
    return report


def check_browsers(ctx: DetectContext) -> None:
    check_chromium_browser(
        ctx,
        "Chrome Cache",
        os.path.join("Library", "Caches", "Google", "Chrome"),
        os.path.join("Library", "Application Support", "Google", "Chrome"),
    )
    check_chromium_browser(
        ctx,
        "Brave Cache",
        os.path.join("Library", "Caches", "BraveSoftware", "Brave-Browser"),
        os.path.join("Library", "Application Support", "BraveSoftware", "Brave-Browser"),
    )


# Registration order of the whole audit, grouped as the report shows it.
DETECTION_ORDER = [
    ("Trash",),
    ("User Caches",),
    ("User Logs",),
    ("System Logs",),
    ("Xcode DerivedData", "Xcode Archives", "Xcode iOS DeviceSupport", check_simulators, "Xcode Caches"),
    (check_homebrew,),
    (check_docker,),
    ("npm Cache", check_yarn, "pnpm Store"),
    ("pip Cache", "Conda Package Cache"),
    (check_browsers, "Firefox Cache", "Safari Cache"),
    ("Mail Downloads",),
    ("iOS Backups",),
    (check_downloads,),
    (check_time_machine,),
    (
        "Spotify Cache",
        "Slack Cache",
        "Discord Cache",
        "Composer Cache",
        "Gradle Cache",
        "CocoaPods Cache",
        "Ruby Gem Cache",
        "Go Cache",
        "Cargo/Rust Cache",
    ),
]


def detect_candidates(
    registry: CandidateRegistry,
    log: logging.Logger,
    home: str = HOME,
    deep: bool = False,
) -> Optional[dict]:
    """
    Run every detector against home, registering what is worth reporting.

    Returns the deep-mode development directory report, or None in fast mode.
    """
    ctx = DetectContext(registry, log, home=home)
    for group in DETECTION_ORDER:
        for step in group:
            if callable(step):
                step(ctx)
            else:
                check_category(ctx, step)

    if deep:
        return report_dev_directories(ctx)
    return None
