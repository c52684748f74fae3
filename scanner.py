"""
Size measurement and read-only filesystem facts for Disk Audit.
Wraps du, df, find, diskutil and tmutil through subprocess.

Nothing in here raises for a missing or unreadable path: those measure as 0.
"""

import os
import shutil
import subprocess
from typing import Optional

HOME = os.path.expanduser("~")


def _run(cmd: list[str], timeout: Optional[int] = 30) -> Optional[str]:
    """Run a subprocess command and return stdout, or None on failure."""
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
        return result.stdout
    except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError):
        return None


def _succeeds(cmd: list[str], timeout: Optional[int] = 15) -> bool:
    """True if the command runs and exits 0."""
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError):
        return False
    return result.returncode == 0


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def dir_size_bytes(path: str) -> int:
    """Return size of path in bytes using du -sk. Returns 0 if inaccessible."""
    if not os.path.exists(path) or not os.access(path, os.R_OK):
        return 0
    out = _run(["du", "-sk", path], timeout=None)
    if not out:
        return 0
    try:
        # du prints one line per argument; the last is the total
        return int(out.strip().splitlines()[-1].split()[0]) * 1024
    except (IndexError, ValueError):
        return 0


def file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


def human_size(size_bytes: int) -> str:
    """Format a byte count as B/KB/MB/GB."""
    if size_bytes >= 1024 ** 3:
        return f"{size_bytes / 1024 ** 3:.1f} GB"
    if size_bytes >= 1024 ** 2:
        return f"{size_bytes / 1024 ** 2:.1f} MB"
    if size_bytes >= 1024:
        return f"{size_bytes // 1024} KB"
    return f"{size_bytes} B"


def find_files(
    root: str,
    pattern: str,
    maxdepth: int = 2,
    min_size_mb: Optional[int] = None,
) -> list[str]:
    """Case-insensitive file name search under root (find -iname)."""
    if not os.path.isdir(root):
        return []
    cmd = ["find", root, "-maxdepth", str(maxdepth), "-iname", pattern, "-type", "f"]
    if min_size_mb is not None:
        cmd += ["-size", f"+{min_size_mb}M"]
    out = _run(cmd, timeout=120)
    if not out:
        return []
    return [line.strip() for line in out.splitlines() if line.strip()]


def sum_file_sizes(paths: list[str]) -> int:
    return sum(file_size(p) for p in paths)


def scan_disk_overview() -> dict:
    """Get overall disk usage via df -k /."""
    empty = {"total_bytes": 0, "used_bytes": 0, "free_bytes": 0, "used_pct": 0}
    out = _run(["df", "-k", "/"])
    if not out:
        return empty

    lines = out.strip().splitlines()
    if len(lines) < 2:
        return empty

    # df -k fields: Filesystem 1024-blocks Used Available Capacity iused ifree %iused Mounted
    parts = lines[1].split()
    try:
        total = int(parts[1]) * 1024
        used = int(parts[2]) * 1024
        free = int(parts[3]) * 1024
    except (IndexError, ValueError):
        return empty
    return {
        "total_bytes": total,
        "used_bytes": used,
        "free_bytes": free,
        "used_pct": round(used / total * 100, 1) if total > 0 else 0,
    }


def disk_usage_lines() -> list[str]:
    """Raw `df -H /` output, for before/after comparison by the operator."""
    out = _run(["df", "-H", "/"])
    if not out:
        return []
    return [line for line in out.splitlines() if line.strip()]


def apfs_purgeable() -> Optional[str]:
    out = _run(["diskutil", "apfs", "list"])
    if not out:
        return None
    for line in out.splitlines():
        if "purgeable" in line.lower() and "(" in line:
            return line.split("(", 1)[1].rstrip(")").strip()
    return None


def du_children(path: str, limit: int = 20, one_filesystem: bool = True) -> list[dict]:
    """Sizes of path and its direct children (du -d 1), largest first."""
    if not os.path.isdir(path):
        return []
    cmd = ["du", "-d", "1", "-k"]
    if one_filesystem:
        cmd.append("-x")
    out = _run(cmd + [path], timeout=None)
    if not out:
        return []

    results = []
    for line in out.splitlines():
        size_str, _, entry = line.partition("\t")
        try:
            size_bytes = int(size_str.strip()) * 1024
        except ValueError:
            continue
        results.append({"path": entry.strip(), "size_bytes": size_bytes})

    return sorted(results, key=lambda x: x["size_bytes"], reverse=True)[:limit]


def largest_files(
    dirs: list[str],
    maxdepth: int,
    min_size_mb: int = 50,
    top_n: int = 25,
    one_filesystem: bool = False,
) -> list[dict]:
    """Files over min_size_mb under dirs, largest first."""
    existing = [d for d in dirs if os.path.isdir(d)]
    if not existing:
        return []
    cmd = ["find"] + existing
    if one_filesystem:
        cmd.append("-xdev")
    cmd += ["-maxdepth", str(maxdepth), "-type", "f", "-size", f"+{min_size_mb}M"]
    out = _run(cmd, timeout=None)
    if not out:
        return []

    results = []
    for path in out.splitlines():
        path = path.strip()
        if path:
            results.append({"path": path, "size_bytes": file_size(path)})

    return sorted(results, key=lambda x: x["size_bytes"], reverse=True)[:top_n]


def largest_dirs(dirs: list[str], top_n: int = 25) -> list[dict]:
    """Children of each existing dir, merged and ranked by size."""
    results = []
    for d in dirs:
        results.extend(du_children(d, limit=10_000, one_filesystem=False))
    return sorted(results, key=lambda x: x["size_bytes"], reverse=True)[:top_n]


def list_local_snapshots() -> Optional[list[str]]:
    """Time Machine local snapshot names, or None when tmutil is unavailable."""
    if not command_exists("tmutil"):
        return None
    out = _run(["tmutil", "listlocalsnapshots", "/"])
    if not out:
        return []
    return [line.strip() for line in out.splitlines() if "com.apple" in line]


def brew_cache_dir() -> Optional[str]:
    if not command_exists("brew"):
        return None
    out = _run(["brew", "--cache"])
    return out.strip() if out and out.strip() else None


def yarn_cache_dir() -> Optional[str]:
    if not command_exists("yarn"):
        return None
    out = _run(["yarn", "cache", "dir"])
    return out.strip() if out and out.strip() else None


def docker_daemon_running() -> bool:
    return command_exists("docker") and _succeeds(["docker", "info"])


def count_unavailable_simulators() -> int:
    out = _run(["xcrun", "simctl", "list", "devices", "unavailable"])
    if not out:
        return 0
    return sum(1 for line in out.splitlines() if "unavailable" in line)


def find_dirs_named(root: str, names: list[str], maxdepth: int = 5) -> list[str]:
    """Directories (or marker files) with one of the given names, skipping hidden trees."""
    if not os.path.isdir(root):
        return []
    expr: list[str] = []
    for i, name in enumerate(names):
        if i:
            expr.append("-o")
        expr += ["-name", name]
    cmd = ["find", root, "-maxdepth", str(maxdepth), "("] + expr + [")", "-not", "-path", "*/.*/*"]
    out = _run(cmd, timeout=None)
    if not out:
        return []
    return [line.strip() for line in out.splitlines() if line.strip()]
