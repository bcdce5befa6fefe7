"""Session name generation for terminal multiplexers.

Names are derived from the workspace, its folder, or a custom name, then
sanitized to ``[A-Za-z0-9-]`` so every multiplexer accepts them. Uniqueness is
checked against a single snapshot of the live session list.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from .launcher import MuxLauncher
from .log import get_logger

logger = get_logger("session")

DEFAULT_SESSION_NAME = "session"


class Strategy(str, Enum):
    """Which source a session name is taken from."""

    WORKSPACE = "workspace"
    FOLDER = "folder"
    CUSTOM = "custom"


@dataclass(frozen=True)
class SessionNameOptions:
    """Workspace context a session name is derived from.

    ``workspace_name`` and ``folder_path`` are ``None`` when the host has no
    value. An empty ``workspace_name`` is a value, not an absence.
    """

    workspace_name: str | None = None
    folder_path: str | None = None
    custom_name: str = ""


def _workspace_candidate(options: SessionNameOptions) -> str | None:
    return options.workspace_name


def _folder_candidate(options: SessionNameOptions) -> str | None:
    if not options.folder_path:
        return None
    return PurePath(options.folder_path).name


def _custom_candidate(options: SessionNameOptions) -> str | None:
    return options.custom_name or None


# strategy -> (candidate picker, strategy to fall back to when it yields None)
NAME_RULES: dict[
    Strategy, tuple[Callable[[SessionNameOptions], str | None], Strategy | None]
] = {
    Strategy.WORKSPACE: (_workspace_candidate, Strategy.FOLDER),
    Strategy.FOLDER: (_folder_candidate, None),
    Strategy.CUSTOM: (_custom_candidate, Strategy.WORKSPACE),
}


def sanitize_session_name(name: str) -> str:
    """Reduce an arbitrary string to a valid session name.

    Examples:
    - "my project" -> "my-project"
    - "my...project" -> "my-project"
    - "-myproject-" -> "myproject"
    - "..." -> "session"
    """
    sanitized = re.sub(r"[^A-Za-z0-9-]", "-", name)
    sanitized = re.sub(r"-+", "-", sanitized)
    sanitized = sanitized.strip("-")
    return sanitized or DEFAULT_SESSION_NAME


def raw_session_name(strategy: Strategy | str, options: SessionNameOptions) -> str:
    """Pick the unsanitized name for a strategy, following the fallback chain.

    workspace -> folder -> "session", and custom -> workspace -> folder -> "session".
    """
    current: Strategy | None = Strategy(strategy)
    visited: set[Strategy] = set()

    while current is not None and current not in visited:
        visited.add(current)
        pick, fallback = NAME_RULES[current]
        candidate = pick(options)
        if candidate is not None:
            return candidate
        current = fallback

    return DEFAULT_SESSION_NAME


def get_session_name(strategy: Strategy | str, options: SessionNameOptions) -> str:
    """Derive the sanitized base session name."""
    return sanitize_session_name(raw_session_name(strategy, options))


def next_free_name(base_name: str, sessions: list[str]) -> str:
    """Return ``base_name`` or its first free ``-N`` suffix (N >= 2).

    Gaps are filled: with "myapp" and "myapp-3" taken, the result is "myapp-2".
    """
    taken = set(sessions)
    if base_name not in taken:
        return base_name

    suffix = 2
    while f"{base_name}-{suffix}" in taken:
        suffix += 1
    return f"{base_name}-{suffix}"


async def get_unique_session_name(base_name: str, launcher: MuxLauncher) -> str:
    """Return a name no live session uses, querying the multiplexer once."""
    sessions = await launcher.list_sessions()
    return next_free_name(base_name, sessions)


async def resolve_with_reuse_option(
    base_name: str,
    launcher: MuxLauncher,
    auto_attach: bool,
    attach_if_exists: bool,
) -> str:
    """Decide between reusing ``base_name`` and picking a fresh unique name.

    An existing session is only reused when both ``auto_attach`` and
    ``attach_if_exists`` are set. Otherwise the result never names a live session.
    """
    sessions = await launcher.list_sessions()
    if auto_attach and attach_if_exists and base_name in sessions:
        logger.debug("Reusing existing session %s", base_name)
        return base_name
    return next_free_name(base_name, sessions)


@dataclass
class SessionContext:
    """State remembered across resolutions within one run.

    Holds the last resolved name, keyed by base name, multiplexer and reuse
    setting, so a profile provider that is asked several times for the same
    terminal does not hand out a new suffix each time. Also tracks the
    missing-multiplexer warning: shown at most once, or never when suppressed.
    """

    cached_key: tuple[str, str, bool] | None = None
    cached_session_name: str | None = None
    suppress_missing_notification: bool = False
    missing_notified: bool = False

    def cached_name_for(self, key: tuple[str, str, bool]) -> str | None:
        if self.cached_key == key:
            return self.cached_session_name
        return None

    def remember(self, key: tuple[str, str, bool], session_name: str) -> None:
        self.cached_key = key
        self.cached_session_name = session_name

    def forget(self) -> None:
        self.cached_key = None
        self.cached_session_name = None

    def should_notify_missing(self) -> bool:
        return not (self.suppress_missing_notification or self.missing_notified)


def memo_key(
    base_name: str, launcher: MuxLauncher, attach_if_exists: bool
) -> tuple[str, str, bool]:
    return (base_name, launcher.binary, attach_if_exists)


async def resolve_session_name(
    base_name: str,
    launcher: MuxLauncher,
    auto_attach: bool,
    attach_if_exists: bool = False,
    context: SessionContext | None = None,
) -> str:
    """Resolve the final session name, using the context memo when attaching.

    The memo only applies to auto-attach; without it every call yields a fresh
    session name.
    """
    key = memo_key(base_name, launcher, attach_if_exists)
    if auto_attach and context is not None:
        cached = context.cached_name_for(key)
        if cached:
            return cached

    session_name = await resolve_with_reuse_option(
        base_name, launcher, auto_attach, attach_if_exists
    )

    if auto_attach and context is not None:
        context.remember(key, session_name)
    return session_name
