"""Main CLI entry point for codemux."""

import asyncio
import json
import subprocess
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

from cyclopts import App, Parameter
from rich.console import Console
from rich.table import Table

from .config import CodemuxConfig, ConfigError, load_config, workspace_name_from_env
from .launcher import MultiplexerKind, SessionKillError, get_launcher
from .log import setup_logging
from .profile import (
    KillTargetError,
    Workspace,
    kill_session,
    name_options,
    provide_terminal_profile,
)
from .session import SessionContext, get_session_name, resolve_session_name

app = App(
    help="Opens terminals backed by named, reattachable tmux or zellij sessions.\n\n"
    "Use 'codemux COMMAND --help' for detailed command options.",
    version_flags=["--version", "-v"],
)
console = Console()


def _load_config(**overrides) -> CodemuxConfig:
    try:
        return load_config().replace(**overrides)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)


def _workspace(workspace_name: str | None, folder: str | None) -> Workspace:
    if workspace_name is None:
        workspace_name = workspace_name_from_env()
    folder_path = str(Path(folder or Path.cwd()).expanduser().resolve())
    return Workspace(name=workspace_name, folder_path=folder_path)


def _warn_missing(multiplexer: MultiplexerKind) -> None:
    console.print(
        f"[yellow]{multiplexer.value} not found. Install it to use codemux.[/yellow]"
    )


@app.command
def new(
    folder: str | None = None,
    workspace_name: str | None = None,
    multiplexer: str | None = None,
    strategy: str | None = None,
    custom_name: str | None = None,
    auto_attach: bool | None = None,
    attach_if_exists: bool | None = None,
    shell: Annotated[str | None, Parameter(name=["-s", "--shell"])] = None,
    no_warn: bool = False,
    verbose: bool = False,
):
    """Open a session: new [--folder DIR] [--multiplexer tmux|zellij]

    Resolves the session name for the workspace and runs the multiplexer in
    your shell. Falls back to a plain shell when the multiplexer is missing.

    Parameters
    ----------
    folder : str
        Workspace folder (default: current directory)
    workspace_name : str
        Workspace display name (default: $CODEMUX_WORKSPACE_NAME)
    multiplexer : str
        tmux or zellij (default: $CODEMUX_MULTIPLEXER or tmux)
    strategy : str
        Session name source: workspace, folder or custom
    custom_name : str
        Session name used by the custom strategy
    auto_attach : bool
        Attach to the session if it is already running
    attach_if_exists : bool
        Reuse the base session name when it is already live
    shell : str
        Shell to run the command in (default: $SHELL)
    no_warn : bool
        Do not warn when the multiplexer is not installed
    verbose : bool
        Show debug logging
    """
    setup_logging(verbose)
    config = _load_config(
        multiplexer=multiplexer,
        strategy=strategy,
        custom_name=custom_name,
        auto_attach=auto_attach,
        attach_if_exists=attach_if_exists,
    )
    context = SessionContext(suppress_missing_notification=no_warn)
    terminal = asyncio.run(
        provide_terminal_profile(
            config,
            _workspace(workspace_name, folder),
            context,
            shell_path=shell,
            notify_missing=_warn_missing,
        )
    )

    if terminal.session_name:
        console.print(f"[cyan]Session:[/cyan] {terminal.session_name}")
        console.print(f"[dim]Working directory:[/dim] {terminal.cwd}")
    else:
        console.print(f"[yellow]Starting plain shell ({terminal.fallback_reason})[/yellow]")

    try:
        result = subprocess.run(
            [terminal.shell_path, *terminal.shell_args], cwd=terminal.cwd
        )
    except OSError as e:
        console.print(f"[red]Error: could not start {terminal.shell_path}: {e}[/red]")
        raise SystemExit(1)
    if result.returncode:
        raise SystemExit(result.returncode)


@app.command
def profile(
    folder: str | None = None,
    workspace_name: str | None = None,
    multiplexer: str | None = None,
    strategy: str | None = None,
    custom_name: str | None = None,
    auto_attach: bool | None = None,
    attach_if_exists: bool | None = None,
    shell: Annotated[str | None, Parameter(name=["-s", "--shell"])] = None,
    json_output: Annotated[bool, Parameter(name=["--json"])] = False,
    verbose: bool = False,
):
    """Show the terminal profile: profile [--json]

    Prints the shell, arguments and working directory a terminal for this
    workspace would be spawned with, without starting anything.

    Parameters
    ----------
    folder : str
        Workspace folder (default: current directory)
    workspace_name : str
        Workspace display name (default: $CODEMUX_WORKSPACE_NAME)
    multiplexer : str
        tmux or zellij (default: $CODEMUX_MULTIPLEXER or tmux)
    strategy : str
        Session name source: workspace, folder or custom
    custom_name : str
        Session name used by the custom strategy
    auto_attach : bool
        Attach to the session if it is already running
    attach_if_exists : bool
        Reuse the base session name when it is already live
    shell : str
        Shell the profile spawns (default: $SHELL)
    json_output : bool
        Print the profile as JSON (for scripting)
    verbose : bool
        Show debug logging
    """
    setup_logging(verbose)
    config = _load_config(
        multiplexer=multiplexer,
        strategy=strategy,
        custom_name=custom_name,
        auto_attach=auto_attach,
        attach_if_exists=attach_if_exists,
    )
    result = asyncio.run(
        provide_terminal_profile(
            config,
            _workspace(workspace_name, folder),
            SessionContext(),
            shell_path=shell,
            notify_missing=None if json_output else _warn_missing,
        )
    )

    if json_output:
        print(json.dumps(asdict(result)))
        return

    table = Table(title="Terminal Profile")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", result.name or "-")
    table.add_row("Shell", result.shell_path)
    table.add_row("Arguments", " ".join(result.shell_args) or "-")
    table.add_row("Working directory", result.cwd or "-")
    if result.fallback_reason:
        table.add_row("Fallback", f"[yellow]{result.fallback_reason}[/yellow]")
    console.print(table)


@app.command
def name(
    folder: str | None = None,
    workspace_name: str | None = None,
    multiplexer: str | None = None,
    strategy: str | None = None,
    custom_name: str | None = None,
    auto_attach: bool | None = None,
    attach_if_exists: bool | None = None,
    verbose: bool = False,
):
    """Show session names: name [--strategy workspace|folder|custom]

    Prints the sanitized base name and the name a new terminal would use
    given the sessions that are currently running.

    Parameters
    ----------
    folder : str
        Workspace folder (default: current directory)
    workspace_name : str
        Workspace display name (default: $CODEMUX_WORKSPACE_NAME)
    multiplexer : str
        tmux or zellij (default: $CODEMUX_MULTIPLEXER or tmux)
    strategy : str
        Session name source: workspace, folder or custom
    custom_name : str
        Session name used by the custom strategy
    auto_attach : bool
        Attach to the session if it is already running
    attach_if_exists : bool
        Reuse the base session name when it is already live
    verbose : bool
        Show debug logging
    """
    setup_logging(verbose)
    config = _load_config(
        multiplexer=multiplexer,
        strategy=strategy,
        custom_name=custom_name,
        auto_attach=auto_attach,
        attach_if_exists=attach_if_exists,
    )
    options = name_options(config, _workspace(workspace_name, folder))
    base_name = get_session_name(config.strategy, options)
    resolved = asyncio.run(
        resolve_session_name(
            base_name,
            get_launcher(config.multiplexer),
            config.auto_attach,
            config.attach_if_exists,
        )
    )
    console.print(f"[cyan]Base name:[/cyan] {base_name}")
    console.print(f"[green]Session name:[/green] {resolved}")


@app.command(name="list")
def list_sessions(*, multiplexer: str | None = None, verbose: bool = False):
    """List sessions: list [--multiplexer tmux|zellij]

    Shows the sessions the multiplexer currently has running.

    Parameters
    ----------
    multiplexer : str
        tmux or zellij (default: $CODEMUX_MULTIPLEXER or tmux)
    verbose : bool
        Show debug logging
    """
    setup_logging(verbose)
    config = _load_config(multiplexer=multiplexer)
    sessions = asyncio.run(get_launcher(config.multiplexer).list_sessions())

    if not sessions:
        console.print(f"[yellow]No {config.multiplexer.value} sessions found[/yellow]")
        return

    table = Table(title=f"{config.multiplexer.value} sessions")
    table.add_column("Session", style="green")
    for session_name in sessions:
        table.add_row(session_name)
    console.print(table)


@app.command
def check(*, multiplexer: str | None = None, verbose: bool = False):
    """Check installation: check [--multiplexer tmux|zellij]

    Exits with status 1 when the multiplexer binary is not on PATH.

    Parameters
    ----------
    multiplexer : str
        tmux or zellij (default: $CODEMUX_MULTIPLEXER or tmux)
    verbose : bool
        Show debug logging
    """
    setup_logging(verbose)
    config = _load_config(multiplexer=multiplexer)
    installed = asyncio.run(get_launcher(config.multiplexer).check_installed())

    if not installed:
        console.print(f"[red]{config.multiplexer.value} is not installed[/red]")
        raise SystemExit(1)
    console.print(f"[green]{config.multiplexer.value} is installed[/green]")


@app.command
def kill(
    target: str = "",
    *,
    multiplexer: str | None = None,
    verbose: bool = False,
):
    """Kill a session: kill [NAME] [--multiplexer tmux|zellij]

    NAME may be a session name or a terminal title such as "CodeMux: work".
    Without NAME the only running session is killed.

    Parameters
    ----------
    target : str
        Session name or terminal title (optional when one session is running)
    multiplexer : str
        tmux or zellij (default: $CODEMUX_MULTIPLEXER or tmux)
    verbose : bool
        Show debug logging
    """
    setup_logging(verbose)
    config = _load_config(multiplexer=multiplexer)

    try:
        session_name = asyncio.run(kill_session(config, target or None))
    except KillTargetError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)
    except SessionKillError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    console.print(f'[green]Session "{session_name}" killed.[/green]')


if __name__ == "__main__":
    app()
