"""Terminal profiles backed by multiplexer sessions.

Ties the pieces together: install check, session name resolution, launch
command, and the shell invocation that runs it. Anything that goes wrong
degrades to a plain shell profile so a terminal always opens.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field

from .config import CodemuxConfig
from .launcher import MultiplexerKind, MuxLauncher, get_launcher
from .log import get_logger
from .session import (
    SessionContext,
    SessionNameOptions,
    get_session_name,
    resolve_session_name,
)
from .shell import default_shell, shell_args

logger = get_logger("profile")

SESSION_NAME_PREFIX = "CodeMux: "


class KillTargetError(Exception):
    """Raised when no single session can be picked for killing."""
    pass


@dataclass(frozen=True)
class Workspace:
    """What the host knows about the current workspace."""

    name: str | None = None
    folder_path: str | None = None


@dataclass(frozen=True)
class TerminalProfile:
    """Everything needed to spawn the terminal process.

    ``session_name`` is None for a plain shell profile, in which case
    ``fallback_reason`` says why no session was used.
    """

    shell_path: str
    name: str | None = None
    shell_args: list[str] = field(default_factory=list)
    cwd: str | None = None
    session_name: str | None = None
    command: str | None = None
    fallback_reason: str | None = None


def session_label(session_name: str) -> str:
    return f"{SESSION_NAME_PREFIX}{session_name}"


def session_name_from_label(label: str) -> str:
    """Strip the terminal label prefix, leaving bare names untouched."""
    if label.startswith(SESSION_NAME_PREFIX):
        return label[len(SESSION_NAME_PREFIX) :]
    return label


def name_options(config: CodemuxConfig, workspace: Workspace) -> SessionNameOptions:
    # The host reports an unnamed workspace as "", which means no name here
    return SessionNameOptions(
        workspace_name=workspace.name or None,
        folder_path=workspace.folder_path,
        custom_name=config.custom_name,
    )


def plain_profile(shell_path: str, reason: str) -> TerminalProfile:
    return TerminalProfile(shell_path=shell_path, fallback_reason=reason)


async def provide_terminal_profile(
    config: CodemuxConfig,
    workspace: Workspace,
    context: SessionContext | None = None,
    shell_path: str | None = None,
    windows: bool | None = None,
    notify_missing: Callable[[MultiplexerKind], None] | None = None,
    launcher: MuxLauncher | None = None,
) -> TerminalProfile:
    """Build a terminal profile that opens the workspace's multiplexer session.

    Parameters
    ----------
    config : CodemuxConfig
        Multiplexer, naming and attach settings
    workspace : Workspace
        Workspace name and folder reported by the host
    context : SessionContext | None
        Per-run state (name memo, notification suppression)
    shell_path : str | None
        Shell to spawn (default: the platform's default shell)
    windows : bool | None
        Force Windows or POSIX shell handling (default: current platform)
    notify_missing : Callable | None
        Called with the multiplexer kind when its binary is missing, unless
        the context suppresses the notification
    launcher : MuxLauncher | None
        Launcher to use instead of the one selected by ``config``

    Returns
    -------
    TerminalProfile
        A session profile, or a plain shell profile on fallback
    """
    if context is None:
        context = SessionContext()
    if shell_path is None:
        shell_path = default_shell(windows)

    try:
        if config.use_command_mode:
            return plain_profile(shell_path, "command mode")

        if launcher is None:
            launcher = get_launcher(config.multiplexer)
        multiplexer = MultiplexerKind(config.multiplexer)

        if not await launcher.check_installed(windows):
            logger.info("%s not found, falling back to shell", multiplexer.value)
            if notify_missing is not None and context.should_notify_missing():
                notify_missing(multiplexer)
                context.missing_notified = True
            return plain_profile(shell_path, f"{multiplexer.value} not installed")

        base_name = get_session_name(config.strategy, name_options(config, workspace))
        session_name = await resolve_session_name(
            base_name,
            launcher,
            config.auto_attach,
            config.attach_if_exists,
            context,
        )
        cwd = workspace.folder_path or os.getcwd()
        command = launcher.build_command(session_name, cwd, config.auto_attach)
        logger.debug("Resolved session %s -> %s", base_name, session_name)

        return TerminalProfile(
            shell_path=shell_path,
            name=session_label(session_name),
            shell_args=shell_args(shell_path, command, windows),
            cwd=cwd,
            session_name=session_name,
            command=command,
        )
    except Exception as e:
        logger.error("Failed to create terminal profile", exc_info=True)
        return plain_profile(shell_path, f"error: {e}")


async def resolve_kill_target(target: str | None, launcher: MuxLauncher) -> str:
    """Pick the session to kill.

    An explicit target (bare name or labelled terminal name) wins. Otherwise
    the only live session is picked.

    Raises
    ------
    KillTargetError
        When there is no target and zero or several sessions are live
    """
    if target:
        return session_name_from_label(target)

    sessions = await launcher.list_sessions()
    if not sessions:
        raise KillTargetError("No CodeMux sessions found.")
    if len(sessions) > 1:
        raise KillTargetError(
            "Multiple sessions found, specify one of: " + ", ".join(sessions)
        )
    return sessions[0]


async def kill_session(
    config: CodemuxConfig, target: str | None, launcher: MuxLauncher | None = None
) -> str:
    """Kill the targeted session and return its name.

    Raises
    ------
    KillTargetError
        When no session can be picked
    SessionKillError
        When the multiplexer fails to kill the session
    """
    if launcher is None:
        launcher = get_launcher(config.multiplexer)
    session_name = await resolve_kill_target(target, launcher)
    try:
        await launcher.kill_session(session_name)
    except Exception:
        logger.error("Failed to kill session %s", session_name, exc_info=True)
        raise
    logger.info("Killed session %s", session_name)
    return session_name
