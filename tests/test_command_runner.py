"""Unit tests for aks_registry/command_runner.py"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from aks_registry.command_runner import CommandRequest, SubprocessRunner
from aks_registry.error_utils import ErrorCategory, InvocationError


class TestCommandRequest:
    """Tests for CommandRequest"""

    def test_command_prepends_program(self):
        """Test that the full command line starts with the program"""
        request = CommandRequest(program="az", args=("acr", "list"))
        assert request.command == ["az", "acr", "list"]

    def test_is_immutable(self):
        """Test that requests cannot be changed after construction"""
        request = CommandRequest(program="az", args=("acr", "list"))
        with pytest.raises(AttributeError):
            request.program = "kubectl"

    def test_str_redacts_secrets(self):
        """Test that secret-bearing flags are masked when logged"""
        request = CommandRequest(program="az", args=("login", "--service-principal", "-u", "id", "-p", "s3cret"))
        assert "s3cret" not in str(request)
        assert str(request).endswith("-p ****")


class TestSubprocessRunner:
    """Tests for SubprocessRunner.execute"""

    def test_returns_stripped_stdout(self):
        """Test that captured stdout is returned without surrounding whitespace"""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(stdout="/subscriptions/s/registries/r\n")
            output = SubprocessRunner(timeout=30).execute(CommandRequest("az", ("acr", "create")))

        assert output == "/subscriptions/s/registries/r"
        mock_run.assert_called_once_with(
            ["az", "acr", "create"], capture_output=True, text=True, check=True, timeout=30
        )

    def test_runs_once_without_retry(self):
        """Test that a failure is not retried"""
        with patch("subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.CalledProcessError(1, ["az"], stderr="boom")
            with pytest.raises(InvocationError):
                SubprocessRunner().execute(CommandRequest("az", ("aks", "list")))
        assert mock_run.call_count == 1

    def test_non_zero_exit_raises_invocation_error(self):
        """Test that CalledProcessError becomes InvocationError with its details"""
        error = subprocess.CalledProcessError(
            3, ["az", "acr", "list"], stderr="ERROR: Please run 'az login' to setup account.\n"
        )
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(InvocationError) as exc_info:
                SubprocessRunner().execute(CommandRequest("az", ("acr", "list")))

        invocation_error = exc_info.value
        assert invocation_error.returncode == 3
        assert invocation_error.command == ["az", "acr", "list"]
        assert "az login" in invocation_error.stderr
        assert invocation_error.category is ErrorCategory.AUTHENTICATION
        assert invocation_error.__cause__ is error

    def test_timeout_raises_invocation_error(self):
        """Test that TimeoutExpired becomes a TIMEOUT InvocationError"""
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["az"], 5)):
            with pytest.raises(InvocationError) as exc_info:
                SubprocessRunner(timeout=5).execute(CommandRequest("az", ("aks", "list")))
        assert exc_info.value.category is ErrorCategory.TIMEOUT

    def test_timeout_with_partial_stderr_bytes(self):
        """Test that partial stderr captured before a timeout is decoded to str"""
        error = subprocess.TimeoutExpired(["az"], 5, stderr=b"x" * 500)
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(InvocationError) as exc_info:
                SubprocessRunner(timeout=5).execute(CommandRequest("az", ("acr", "list")))

        invocation_error = exc_info.value
        assert invocation_error.category is ErrorCategory.TIMEOUT
        assert invocation_error.stderr == "x" * 500
        assert invocation_error.details["stderr"] == "x" * 200 + "..."

    def test_timeout_with_short_stderr_bytes(self):
        """Test that short byte stderr is stored as text"""
        error = subprocess.TimeoutExpired(["az"], 5, stderr=b"warn\n")
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(InvocationError) as exc_info:
                SubprocessRunner(timeout=5).execute(CommandRequest("az", ("acr", "list")))
        assert exc_info.value.stderr == "warn"

    def test_missing_program_raises_invocation_error(self):
        """Test that a missing executable is a CONFIGURATION InvocationError"""
        with patch("subprocess.run", side_effect=FileNotFoundError(2, "No such file", "az")):
            with pytest.raises(InvocationError) as exc_info:
                SubprocessRunner().execute(CommandRequest("az", ("aks", "list")))
        assert exc_info.value.category is ErrorCategory.CONFIGURATION
        assert exc_info.value.returncode is None
