"""Zellij launcher."""

from .launcher import MuxLauncher
from .shell import quote


class ZellijLauncher(MuxLauncher):
    """Launcher for zellij sessions."""

    binary = "zellij"

    def build_command(self, session_name: str, cwd: str, auto_attach: bool) -> str:
        """Build the zellij launch command.

        Zellij has no single attach-or-create flag, so auto-attach chains an
        attach with a create that only runs when the attach fails.
        """
        name = quote(session_name)
        directory = quote(cwd)
        create = f"zellij -s {name} -c {directory}"
        if auto_attach:
            return f"zellij attach {name} || {create}"
        return create

    def list_sessions_args(self) -> list[str]:
        # -n: no colors or formatting, one name per line
        return ["list-sessions", "-n"]

    def kill_session_args(self, session_name: str) -> list[str]:
        return ["kill-session", "-s", session_name]
