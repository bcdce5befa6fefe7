"""Shared fixtures for codemux tests."""

from unittest.mock import AsyncMock, Mock

import pytest

from codemux.launcher import MuxLauncher
from codemux.tmux import TmuxLauncher

CODEMUX_ENV_VARS = [
    "CODEMUX_MULTIPLEXER",
    "CODEMUX_AUTO_ATTACH",
    "CODEMUX_ATTACH_IF_EXISTS",
    "CODEMUX_SESSION_NAME_STRATEGY",
    "CODEMUX_CUSTOM_SESSION_NAME",
    "CODEMUX_USE_COMMAND_MODE",
    "CODEMUX_WORKSPACE_NAME",
]


def make_launcher(sessions=None, installed=True, real=None) -> Mock:
    """Build a launcher double with canned async answers.

    ``build_command`` delegates to a real launcher so command strings stay
    realistic.
    """
    real = real or TmuxLauncher()
    launcher = Mock(spec=MuxLauncher)
    launcher.binary = real.binary
    launcher.list_sessions = AsyncMock(return_value=list(sessions or []))
    launcher.check_installed = AsyncMock(return_value=installed)
    launcher.kill_session = AsyncMock(return_value=None)
    launcher.build_command = Mock(side_effect=real.build_command)
    return launcher


def make_proc(returncode=0, stdout=b"", stderr=b""):
    """Fake asyncio subprocess."""
    proc = AsyncMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's CODEMUX_* settings out of the tests."""
    for var in CODEMUX_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def launcher_factory():
    return make_launcher


@pytest.fixture
def proc_factory():
    return make_proc
