"""Multiplexer launcher contract and factory.

A launcher wraps one multiplexer binary. It knows how to build the shell command
that creates or attaches a session, and how to list, kill and detect sessions by
running the binary as a subprocess. Launchers hold no state of their own.
"""

import asyncio
import subprocess
from abc import ABC, abstractmethod
from enum import Enum

from .log import get_logger
from .shell import is_windows

logger = get_logger("launcher")


class MultiplexerKind(str, Enum):
    """Supported terminal multiplexers."""

    TMUX = "tmux"
    ZELLIJ = "zellij"


class SessionKillError(Exception):
    """Raised when a multiplexer session could not be killed."""

    def __init__(self, session_name: str, reason: str = ""):
        self.session_name = session_name
        message = f"Failed to kill session '{session_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


async def run(cmd: str, *args: str) -> str:
    """Run a command and return its stripped stdout.

    Raises
    ------
    subprocess.CalledProcessError
        When the command exits with a non-zero status
    OSError
        When the executable cannot be started (e.g. not installed)
    """
    logger.debug("Running %s %s", cmd, " ".join(args))
    proc = await asyncio.create_subprocess_exec(
        cmd,
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await proc.communicate()
    if proc.returncode:
        raise subprocess.CalledProcessError(
            proc.returncode, [cmd, *args], output=stdout, stderr=stderr
        )
    return stdout.decode(errors="replace").strip()


class MuxLauncher(ABC):
    """Create/attach, list, kill and detect sessions of one multiplexer."""

    binary: str

    @abstractmethod
    def build_command(self, session_name: str, cwd: str, auto_attach: bool) -> str:
        """Build the shell command that launches or attaches the session."""

    @abstractmethod
    def list_sessions_args(self) -> list[str]:
        """Arguments of the list-sessions subcommand."""

    @abstractmethod
    def kill_session_args(self, session_name: str) -> list[str]:
        """Arguments of the kill-session subcommand."""

    async def list_sessions(self) -> list[str]:
        """Return live session names, or an empty list if they cannot be read."""
        try:
            stdout = await run(self.binary, *self.list_sessions_args())
        except (subprocess.CalledProcessError, OSError) as e:
            logger.debug("Could not list %s sessions: %s", self.binary, e)
            return []
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    async def kill_session(self, session_name: str) -> None:
        """Kill a session by name.

        Raises
        ------
        SessionKillError
            When the multiplexer refuses or cannot be run
        """
        try:
            await run(self.binary, *self.kill_session_args(session_name))
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            raise SessionKillError(session_name, stderr or str(e)) from e
        except OSError as e:
            raise SessionKillError(session_name, str(e)) from e

    async def check_installed(self, windows: bool | None = None) -> bool:
        """Check whether the multiplexer binary is on the executable search path."""
        if windows is None:
            windows = is_windows()
        lookup = "where" if windows else "which"
        try:
            await run(lookup, self.binary)
        except (subprocess.CalledProcessError, OSError):
            return False
        return True


def get_launcher(kind: MultiplexerKind | str) -> MuxLauncher:
    """Return a fresh launcher for the given multiplexer.

    Raises
    ------
    ValueError
        When ``kind`` is not a supported multiplexer name
    """
    kind = MultiplexerKind(kind)

    if kind is MultiplexerKind.ZELLIJ:
        from .zellij import ZellijLauncher

        return ZellijLauncher()

    from .tmux import TmuxLauncher

    return TmuxLauncher()
