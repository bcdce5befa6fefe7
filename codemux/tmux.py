"""Tmux launcher.

Session names and working directories are shell-quoted before they are
interpolated into the launch command.
"""

from .launcher import MuxLauncher
from .shell import quote


class TmuxLauncher(MuxLauncher):
    """Launcher for tmux sessions."""

    binary = "tmux"

    def build_command(self, session_name: str, cwd: str, auto_attach: bool) -> str:
        """Build the tmux new-session command.

        With ``auto_attach`` the ``-A`` flag makes tmux attach to the session when
        it already exists. Without it tmux refuses a duplicate name.

        Examples:
        - ("work", "/home/u/project", True)
          -> "tmux new-session -A -s work -c /home/u/project"
        - ("work", "/home/u/project", False)
          -> "tmux new-session -s work -c /home/u/project"
        """
        name = quote(session_name)
        directory = quote(cwd)
        if auto_attach:
            return f"tmux new-session -A -s {name} -c {directory}"
        return f"tmux new-session -s {name} -c {directory}"

    def list_sessions_args(self) -> list[str]:
        return ["list-sessions", "-F", "#{session_name}"]

    def kill_session_args(self, session_name: str) -> list[str]:
        return ["kill-session", "-t", session_name]
