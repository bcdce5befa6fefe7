"""Shell quoting and shell argument mapping.

Everything here is pure: quoting a word for a POSIX command line, and turning a
multiplexer command string into the argument vector for the user's shell.
"""

import ntpath
import os
import posixpath
import shlex

LOGIN_SHELLS = frozenset({"bash", "zsh", "fish", "sh"})


def quote(value: str) -> str:
    """Quote a string so the shell sees it as exactly one word.

    Examples:
    - "" -> "''"
    - "work" -> "work"
    - "/home/u/my project" -> "'/home/u/my project'"
    - "it's" -> "'it'\"'\"'s'"
    """
    return shlex.quote(value)


def is_windows() -> bool:
    return os.name == "nt"


def default_shell(windows: bool | None = None) -> str:
    """Return the shell executable a new terminal would spawn.

    Uses $SHELL on POSIX (falling back to /bin/bash) and %COMSPEC% on Windows
    (falling back to cmd.exe).
    """
    if windows is None:
        windows = is_windows()
    if windows:
        return os.environ.get("COMSPEC") or "cmd.exe"
    return os.environ.get("SHELL") or "/bin/bash"


def shell_args(shell_path: str, command: str, windows: bool | None = None) -> list[str]:
    """Build the argument vector that makes ``shell_path`` run ``command``.

    Parameters
    ----------
    shell_path : str
        Path (or bare name) of the shell executable
    command : str
        Fully quoted command line to run
    windows : bool | None
        Force the Windows or POSIX mapping (default: current platform)

    Returns
    -------
    list[str]
        Arguments to pass after the shell executable
    """
    if windows is None:
        windows = is_windows()

    if windows:
        lowered = shell_path.lower()
        if "powershell" in lowered or ntpath.basename(lowered).startswith("pwsh"):
            return ["-NoLogo", "-NoProfile", "-Command", command]
        return ["/c", command]

    if posixpath.basename(shell_path) in LOGIN_SHELLS:
        return ["-l", "-c", command]
    return ["-c", command]
