"""
Category definitions for cleanup candidates.

CATEGORIES describes every category a simple path detector can register:
where to look (first existing path wins), the size that makes it worth
reporting, its risk tier and the texts shown to the operator. Category
names are stable identifiers; build_actions() maps each one to the
action that cleans it up.
"""

import os

from actions import (
    CleanupAction,
    DeleteAction,
    DeleteContentsAction,
    DeleteMatchingFilesAction,
    ExternalToolAction,
    ManualReviewAction,
    ShellCommandAction,
)
from registry import Risk

HOME = os.path.expanduser("~")

MB = 1024 * 1024
GB = 1024 * MB

# Paths are relative to the home directory unless absolute.
# Commands may use {home} and {path}.
CATEGORIES = {
    "Trash": {
        "paths": [".Trash"],
        "threshold": 1 * MB,
        "risk": Risk.LOW,
        "reason": "Already deleted by user; sitting in Trash.",
        "warning": "None — these are already-deleted items.",
        "command": "rm -rf {home}/.Trash/*",
    },
    "User Caches": {
        "paths": ["Library/Caches"],
        "threshold": 100 * MB,
        "risk": Risk.LOW,
        "reason": "Application caches; rebuilt automatically on next use.",
        "warning": "Apps may be slightly slower on first launch after clearing.",
        "command": "rm -rf {home}/Library/Caches/*",
    },
    "User Logs": {
        "paths": ["Library/Logs"],
        "threshold": 50 * MB,
        "risk": Risk.LOW,
        "reason": "Application log files; macOS and apps recreate as needed.",
        "warning": "Lose historical logs for debugging. Usually unimportant.",
        "command": "rm -rf {home}/Library/Logs/*",
    },
    "System Logs": {
        "paths": ["/private/var/log"],
        "threshold": 100 * MB,
        "risk": Risk.MED,
        "reason": "System log files; macOS rotates these via newsyslog/ASL.",
        "warning": "Requires sudo. macOS will recreate. Lose historical diagnostic data.",
        "command": "sudo rm -rf /private/var/log/asl/*.asl",
    },
    "Xcode DerivedData": {
        "paths": ["Library/Developer/Xcode/DerivedData"],
        "threshold": 100 * MB,
        "risk": Risk.LOW,
        "reason": "Build artifacts; Xcode rebuilds on next build.",
        "warning": "Next build will be slower (clean build).",
        "command": "rm -rf '{path}'",
    },
    "Xcode Archives": {
        "paths": ["Library/Developer/Xcode/Archives"],
        "threshold": 100 * MB,
        "risk": Risk.MED,
        "reason": "Old app build archives for distribution.",
        "warning": "Cannot re-submit old builds to App Store without re-archiving.",
        "command": "rm -rf '{path}'",
    },
    "Xcode iOS DeviceSupport": {
        "paths": ["Library/Developer/Xcode/iOS DeviceSupport"],
        "threshold": 500 * MB,
        "risk": Risk.LOW,
        "reason": "Debug symbols for connected iOS devices; re-downloaded on connect.",
        "warning": "First device debug session after cleanup will be slower.",
        "command": "rm -rf '{path}'",
    },
    "Xcode Caches": {
        "paths": ["Library/Caches/com.apple.dt.Xcode"],
        "threshold": 100 * MB,
        "risk": Risk.LOW,
        "reason": "Xcode build caches; rebuilt automatically.",
        "warning": "None significant.",
        "command": "rm -rf '{path}'",
    },
    "npm Cache": {
        "paths": [".npm"],
        "threshold": 100 * MB,
        "risk": Risk.LOW,
        "reason": "npm package cache; re-downloaded as needed.",
        "warning": "Slightly slower first npm install.",
        "command": "npm cache clean --force",
    },
    "pnpm Store": {
        "paths": ["Library/pnpm/store", ".local/share/pnpm/store"],
        "threshold": 100 * MB,
        "risk": Risk.LOW,
        "reason": "pnpm content-addressable store; re-downloaded as needed.",
        "warning": "Slower first pnpm install after clearing.",
        "command": "pnpm store prune",
    },
    "pip Cache": {
        "paths": ["Library/Caches/pip"],
        "threshold": 50 * MB,
        "risk": Risk.LOW,
        "reason": "pip download cache; packages re-downloaded on install.",
        "warning": "Slower first pip install.",
        "command": "pip cache purge",
    },
    "Conda Package Cache": {
        "paths": [".conda/pkgs"],
        "threshold": 500 * MB,
        "risk": Risk.MED,
        "reason": "Conda cached packages; re-downloaded on install.",
        "warning": "Slower environment creation. Verify no env depends on cached pkgs.",
        "command": "conda clean --all",
    },
    "Firefox Cache": {
        "paths": ["Library/Caches/Firefox/Profiles"],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "Browser cache files; rebuilt as you browse.",
        "warning": "Websites load slightly slower on first visit.",
        "command": "rm -rf '{path}'",
    },
    "Safari Cache": {
        "paths": ["Library/Caches/com.apple.Safari"],
        "threshold": 200 * MB,
        "risk": Risk.MED,
        "reason": "Safari web cache; rebuilt as you browse.",
        "warning": "Prefer clearing through Safari settings to avoid issues.",
        "command": "rm -rf '{path}'",
    },
    "Mail Downloads": {
        "paths": ["Library/Containers/com.apple.mail/Data/Library/Mail Downloads"],
        "threshold": 50 * MB,
        "risk": Risk.LOW,
        "reason": "Cached mail attachment previews; re-downloaded from server.",
        "warning": "Attachments will need to be re-downloaded if opened again.",
        "command": "rm -rf '{path}'",
    },
    "iOS Backups": {
        "paths": ["Library/Application Support/MobileSync/Backup"],
        "threshold": 1 * GB,
        "risk": Risk.HIGH,
        "reason": "Local iOS device backups.",
        "warning": "PERMANENT data loss if no iCloud/other backup exists.",
        "command": "# Review individual backups in Finder or: rm -rf '{path}/<device-uuid>'",
    },
    "Spotify Cache": {
        "paths": ["Library/Application Support/Spotify/PersistentCache", "Library/Caches/com.spotify.client"],
        "threshold": 500 * MB,
        "risk": Risk.LOW,
        "reason": "Offline music cache; Spotify re-downloads as needed.",
        "warning": "Previously cached/downloaded songs will need to re-download.",
        "command": "rm -rf '{path}'",
    },
    "Slack Cache": {
        "paths": [
            "Library/Application Support/Slack/Cache",
            "Library/Containers/com.tinyspeck.slackmacgap/Data/Library/Application Support/Slack/Cache",
        ],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "Slack cached files; re-downloaded from Slack servers.",
        "warning": "None significant; images/files reload from server.",
        "command": "rm -rf '{path}'",
    },
    "Discord Cache": {
        "paths": ["Library/Application Support/discord/Cache"],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "Discord cached media; re-downloaded from servers.",
        "warning": "None significant.",
        "command": "rm -rf '{path}'",
    },
    "Composer Cache": {
        "paths": [".composer/cache", ".cache/composer"],
        "threshold": 100 * MB,
        "risk": Risk.LOW,
        "reason": "PHP Composer package cache; re-downloaded on install.",
        "warning": "Slower first composer install.",
        "command": "composer clear-cache",
    },
    "Gradle Cache": {
        "paths": [".gradle/caches"],
        "threshold": 500 * MB,
        "risk": Risk.LOW,
        "reason": "Gradle build cache; rebuilt/re-downloaded on build.",
        "warning": "First build after clearing is slower.",
        "command": "rm -rf '{path}'",
    },
    "CocoaPods Cache": {
        "paths": ["Library/Caches/CocoaPods"],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "CocoaPods spec and pod cache; re-downloaded on pod install.",
        "warning": "Slower first pod install.",
        "command": "pod cache clean --all",
    },
    "Ruby Gem Cache": {
        "paths": [".gem"],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "Cached Ruby gems; re-downloaded on install.",
        "warning": "Slower first gem install.",
        "command": "gem cleanup",
    },
    "Go Cache": {
        "paths": ["go/pkg/mod/cache", "Library/Caches/go-build"],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "Go module downloads and build cache; re-downloaded on build.",
        "warning": "Slower first build.",
        "command": "go clean -cache -modcache",
    },
    "Cargo/Rust Cache": {
        "paths": [".cargo/registry"],
        "threshold": 200 * MB,
        "risk": Risk.LOW,
        "reason": "Rust crate downloads; re-downloaded on build.",
        "warning": "Slower first cargo build.",
        "command": "rm -rf '{path}/cache'",
    },
}

BROWSER_COMMAND = "rm -rf '{cache}' '{profile}/Default/Cache' '{profile}/Default/Code Cache'"


def resolve_path(relative: str, home: str = HOME) -> str:
    if os.path.isabs(relative):
        return relative
    return os.path.join(home, relative)


def build_actions() -> dict[str, CleanupAction]:
    """Map every known category to its cleanup action."""
    browser = ShellCommandAction(failure_hint="Some files could not be cleared (browser may be running).")
    return {
        "Trash": DeleteContentsAction("Trash emptied."),
        "User Caches": DeleteContentsAction("User caches cleared."),
        "User Logs": DeleteContentsAction("User logs cleared."),
        "System Logs": ShellCommandAction(
            "sudo rm -rf /private/var/log/asl/*.asl",
            note="This requires sudo.",
            failure_hint="Failed. Try running with sudo.",
        ),
        "Xcode DerivedData": DeleteAction(),
        "Xcode Archives": DeleteAction(),
        "Xcode iOS DeviceSupport": DeleteAction(),
        "Xcode Simulators (unavailable)": ExternalToolAction(
            ["xcrun", "simctl", "delete", "unavailable"], "Unavailable simulators removed."
        ),
        "Xcode Caches": DeleteAction(),
        "Homebrew Cache": ExternalToolAction(["brew", "cleanup", "--prune=all"], "Homebrew cache cleaned."),
        "Docker (prune)": ExternalToolAction(
            ["docker", "system", "prune", "-a", "-f"],
            "Docker pruned.",
            final_confirmation="Final confirmation — proceed with Docker prune?",
            caution="This will remove ALL unused Docker images, containers, and networks.",
        ),
        "npm Cache": ExternalToolAction(["npm", "cache", "clean", "--force"], "npm cache cleared."),
        "Yarn Cache": ExternalToolAction(["yarn", "cache", "clean"], "Yarn cache cleared."),
        "pnpm Store": ExternalToolAction(["pnpm", "store", "prune"], "pnpm store pruned."),
        "pip Cache": ExternalToolAction(["pip", "cache", "purge"], "pip cache purged."),
        "Conda Package Cache": ExternalToolAction(["conda", "clean", "--all", "-y"], "Conda cache cleaned."),
        "Chrome Cache": browser,
        "Brave Cache": browser,
        "Firefox Cache": browser,
        "Safari Cache": browser,
        "DMG Installers": DeleteMatchingFilesAction("*.dmg"),
        "PKG Installers": DeleteMatchingFilesAction("*.pkg"),
        "Large ZIPs in Downloads": ManualReviewAction(
            ["Large ZIPs need manual review. Listing:"], list_pattern="*.zip", min_size_mb=100
        ),
        "Mail Downloads": DeleteAction(),
        "iOS Backups": ManualReviewAction(
            [
                "iOS backup deletion must be done carefully.",
                "Open Finder > Your iPhone > Manage Backups to review.",
                "Or delete individual backups from:",
                "  {path}/",
            ]
        ),
        "Time Machine Snapshots": ExternalToolAction(
            ["sudo", "tmutil", "thinlocalsnapshots", "/", "9999999999", "4"],
            "Snapshots thinned.",
            final_confirmation="Thin all local Time Machine snapshots?",
            caution="This requires sudo.",
        ),
        "Spotify Cache": DeleteAction(),
        "Slack Cache": DeleteAction(),
        "Discord Cache": DeleteAction(),
        "Composer Cache": ExternalToolAction(
            ["composer", "clear-cache"], "Composer cache cleared.", fallback=DeleteAction()
        ),
        "Gradle Cache": DeleteAction(),
        "CocoaPods Cache": ExternalToolAction(
            ["pod", "cache", "clean", "--all"], "CocoaPods cache cleared.", fallback=DeleteAction()
        ),
        "Ruby Gem Cache": ExternalToolAction(["gem", "cleanup"], "Gems cleaned."),
        "Go Cache": ExternalToolAction(["go", "clean", "-cache", "-modcache"], "Go cache cleared."),
        "Cargo/Rust Cache": DeleteAction(subpath="cache"),
    }


# Anything a detector registers without a table entry runs its own command.
GENERIC_ACTION = ShellCommandAction()

MANUAL_REVIEW_CATEGORIES = frozenset(
    name for name, action in build_actions().items() if action.manual_review
)


def is_manual_review(category: str) -> bool:
    return category in MANUAL_REVIEW_CATEGORIES
