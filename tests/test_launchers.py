"""Tests for the tmux and zellij launchers."""

import subprocess
from unittest.mock import AsyncMock, patch

import pytest

from codemux.launcher import MultiplexerKind, SessionKillError, get_launcher, run
from codemux.session import get_unique_session_name
from codemux.tmux import TmuxLauncher
from codemux.zellij import ZellijLauncher


class TestTmuxBuildCommand:
    """Test tmux launch command generation."""

    def test_auto_attach_adds_dash_a(self):
        """Test that auto-attach uses new-session -A (attach or create)."""
        cmd = TmuxLauncher().build_command("work", "/home/u/project", True)
        assert cmd == "tmux new-session -A -s work -c /home/u/project"

    def test_without_auto_attach_omits_dash_a(self):
        """Test that a plain new-session is built without auto-attach."""
        cmd = TmuxLauncher().build_command("work", "/home/u/project", False)
        assert cmd == "tmux new-session -s work -c /home/u/project"
        assert "-A" not in cmd

    def test_cwd_with_spaces_is_quoted(self):
        """Test that a directory with spaces stays one argument."""
        cmd = TmuxLauncher().build_command("work", "/home/u/my project", True)
        assert cmd == "tmux new-session -A -s work -c '/home/u/my project'"

    def test_cwd_with_single_quote_is_quoted(self):
        """Test that an embedded single quote cannot break out of quoting."""
        cmd = TmuxLauncher().build_command("work", "/home/u/bob's", False)
        assert cmd.endswith("-c '/home/u/bob'\"'\"'s'")


class TestZellijBuildCommand:
    """Test zellij launch command generation."""

    def test_auto_attach_uses_attach_or_create(self):
        """Test the attach-or-create form.

        BEHAVIOR: zellij has no single attach-or-create flag, so attach is
        tried first and creation runs only if it fails.
        """
        cmd = ZellijLauncher().build_command("work", "/home/u/project", True)
        assert cmd == "zellij attach work || zellij -s work -c /home/u/project"

    def test_without_auto_attach_only_creates(self):
        """Test that only the create command is built without auto-attach."""
        cmd = ZellijLauncher().build_command("work", "/home/u/project", False)
        assert cmd == "zellij -s work -c /home/u/project"
        assert "attach" not in cmd

    def test_cwd_is_quoted(self):
        """Test that the working directory is shell-quoted."""
        cmd = ZellijLauncher().build_command("work", "/tmp/a b", False)
        assert cmd == "zellij -s work -c '/tmp/a b'"


class TestRun:
    """Test the async subprocess runner."""

    @pytest.mark.asyncio
    async def test_returns_stripped_stdout(self, proc_factory):
        """Test that stdout is decoded and stripped."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(stdout=b"  hello\n")
            assert await run("echo", "hello") == "hello"
            assert mock_exec.call_args.args == ("echo", "hello")

    @pytest.mark.asyncio
    async def test_nonzero_exit_raises(self, proc_factory):
        """Test that a failing command raises CalledProcessError with its stderr."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(returncode=2, stderr=b"boom")
            with pytest.raises(subprocess.CalledProcessError) as exc_info:
                await run("false")
            assert exc_info.value.returncode == 2
            assert exc_info.value.stderr == b"boom"

    @pytest.mark.asyncio
    async def test_undecodable_stdout_is_replaced(self, proc_factory):
        """Test that invalid UTF-8 in stdout does not raise.

        BEHAVIOR: Bad bytes become U+FFFD instead of a UnicodeDecodeError.
        """
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(stdout=b"ok \xff\xfe")
            assert await run("tmux", "ls") == "ok \ufffd\ufffd"


class TestListSessions:
    """Test listing live sessions."""

    @pytest.mark.asyncio
    async def test_tmux_parses_one_name_per_line(self, proc_factory):
        """Test that blank lines are dropped and the format flag is passed."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(stdout=b"alpha\n\nbeta\n")
            sessions = await TmuxLauncher().list_sessions()

        assert sessions == ["alpha", "beta"]
        assert mock_exec.call_args.args == (
            "tmux",
            "list-sessions",
            "-F",
            "#{session_name}",
        )

    @pytest.mark.asyncio
    async def test_zellij_uses_no_formatting_flag(self, proc_factory):
        """Test that zellij is asked for plain names without colors."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(stdout=b"work\n")
            sessions = await ZellijLauncher().list_sessions()

        assert sessions == ["work"]
        assert mock_exec.call_args.args == ("zellij", "list-sessions", "-n")

    @pytest.mark.asyncio
    async def test_no_server_running_gives_empty_list(self, proc_factory):
        """Test that tmux's "no server running" exit means no sessions."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(
                returncode=1, stderr=b"no server running on /tmp/tmux-1000/default"
            )
            assert await TmuxLauncher().list_sessions() == []

    @pytest.mark.asyncio
    async def test_missing_binary_gives_empty_list(self):
        """Test that a missing executable means no sessions."""
        with patch(
            "asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=FileNotFoundError("tmux"),
        ):
            assert await TmuxLauncher().list_sessions() == []

    @pytest.mark.asyncio
    async def test_undecodable_line_does_not_hide_other_sessions(self, proc_factory):
        """Test uniqueness when one session name is not valid UTF-8.

        BEHAVIOR: The bad line is decoded with replacement characters, the
        readable names are still seen, so "myapp" collides and gets -2.
        """
        # ARRANGE
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(stdout=b"myapp\n\xff\xfebad\n")

            # ACT
            result = await get_unique_session_name("myapp", TmuxLauncher())

        # ASSERT
        assert result == "myapp-2"


class TestKillSession:
    """Test killing sessions."""

    @pytest.mark.asyncio
    async def test_tmux_kill_uses_target_flag(self, proc_factory):
        """Test the tmux kill-session -t form."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory()
            await TmuxLauncher().kill_session("work")

        assert mock_exec.call_args.args == ("tmux", "kill-session", "-t", "work")

    @pytest.mark.asyncio
    async def test_zellij_kill_uses_session_flag(self, proc_factory):
        """Test the zellij kill-session -s form."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory()
            await ZellijLauncher().kill_session("work")

        assert mock_exec.call_args.args == ("zellij", "kill-session", "-s", "work")

    @pytest.mark.asyncio
    async def test_unknown_session_raises(self, proc_factory):
        """Test that the multiplexer's stderr ends up in the kill error."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(
                returncode=1, stderr=b"can't find session: nope"
            )
            with pytest.raises(SessionKillError, match="can't find session") as exc_info:
                await TmuxLauncher().kill_session("nope")

        assert exc_info.value.session_name == "nope"
        assert isinstance(exc_info.value.__cause__, subprocess.CalledProcessError)

    @pytest.mark.asyncio
    async def test_undecodable_stderr_still_raises_kill_error(self, proc_factory):
        """Test that invalid UTF-8 in stderr gives SessionKillError.

        BEHAVIOR: Callers catching SessionKillError never see a
        UnicodeDecodeError instead.
        """
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(returncode=1, stderr=b"\xff\xfe gone")
            with pytest.raises(SessionKillError, match="gone"):
                await TmuxLauncher().kill_session("work")

    @pytest.mark.asyncio
    async def test_missing_binary_raises(self):
        """Test that a missing executable is reported as a kill error."""
        with patch(
            "asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=FileNotFoundError("zellij"),
        ):
            with pytest.raises(SessionKillError):
                await ZellijLauncher().kill_session("work")


class TestCheckInstalled:
    """Test binary detection."""

    @pytest.mark.asyncio
    async def test_posix_uses_which(self, proc_factory):
        """Test that `which` is used off Windows."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(stdout=b"/usr/bin/tmux\n")
            assert await TmuxLauncher().check_installed(windows=False) is True

        assert mock_exec.call_args.args == ("which", "tmux")

    @pytest.mark.asyncio
    async def test_windows_uses_where(self, proc_factory):
        """Test that `where` is used on Windows."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory()
            assert await ZellijLauncher().check_installed(windows=True) is True

        assert mock_exec.call_args.args == ("where", "zellij")

    @pytest.mark.asyncio
    async def test_not_found_is_false(self, proc_factory):
        """Test that a failed lookup means not installed."""
        with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mock_exec:
            mock_exec.return_value = proc_factory(returncode=1)
            assert await TmuxLauncher().check_installed(windows=False) is False

    @pytest.mark.asyncio
    async def test_lookup_tool_missing_is_false(self):
        """Test that a missing `which` is treated as not installed, not an error."""
        with patch(
            "asyncio.create_subprocess_exec",
            new_callable=AsyncMock,
            side_effect=FileNotFoundError("which"),
        ):
            assert await TmuxLauncher().check_installed(windows=False) is False


class TestGetLauncher:
    """Test launcher selection."""

    def test_tmux(self):
        """Test selection by enum member."""
        assert isinstance(get_launcher(MultiplexerKind.TMUX), TmuxLauncher)

    def test_zellij_by_name(self):
        """Test selection by plain string."""
        assert isinstance(get_launcher("zellij"), ZellijLauncher)

    def test_fresh_instance_per_call(self):
        """Test that launchers are not shared between callers."""
        assert get_launcher("tmux") is not get_launcher("tmux")

    def test_unknown_multiplexer_raises(self):
        """Test that an unsupported multiplexer is rejected."""
        with pytest.raises(ValueError):
            get_launcher("screen")
