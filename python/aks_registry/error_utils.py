"""
Error types for Azure CLI orchestration, with actionable guidance for users.

Every failure surfaced by the resolver is an ActionableError subclass built by
one of the create_* factories below, so callers get a message, a category,
suggested fixes and the raw details in one object.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

OUTPUT_EXCERPT_LENGTH = 200


class ErrorCategory(Enum):
    """Categories of errors for better error handling"""
    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    PERMISSION = "permission"
    RESOURCE = "resource"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class ActionableError(Exception):
    """Exception with actionable guidance for users"""

    def __init__(self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN,
                 suggestions: Optional[List[str]] = None, details: Optional[Dict[str, Any]] = None):
        """Initialize actionable error

        Args:
            message: Primary error message
            category: Error category for classification
            suggestions: List of suggested fixes
            details: Additional context information
        """
        self.message = message
        self.category = category
        self.suggestions = suggestions or []
        self.details = details or {}
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format the complete error message with suggestions"""
        lines = [self.message]

        if self.suggestions:
            lines.append("\nSuggested fixes:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"   {i}. {suggestion}")

        if self.details:
            lines.append("\nAdditional details:")
            for key, value in self.details.items():
                lines.append(f"   {key}: {value}")

        return "\n".join(lines)


class InvocationError(ActionableError):
    """The external CLI could not be started, timed out, or exited non-zero."""

    def __init__(self, message: str, command: Sequence[str], returncode: Optional[int] = None,
                 stderr: str = "", **kwargs):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, **kwargs)


class DecodeError(ActionableError):
    """CLI output could not be decoded into the expected shape."""

    def __init__(self, message: str, kind: str, **kwargs):
        self.kind = kind
        super().__init__(message, **kwargs)


class CredentialShapeError(ActionableError):
    """A registry credential came back without any password slots."""


def _excerpt(text: str) -> str:
    if len(text) <= OUTPUT_EXCERPT_LENGTH:
        return text
    return text[:OUTPUT_EXCERPT_LENGTH] + "..."


def create_invocation_error(command: Sequence[str], error: Exception) -> InvocationError:
    """Create actionable error for a failed CLI invocation.

    Understands subprocess.CalledProcessError, subprocess.TimeoutExpired and
    OSError (program missing or not executable).
    """
    program = command[0] if command else ""
    returncode = getattr(error, "returncode", None)
    stderr = getattr(error, "stderr", None) or ""
    # TimeoutExpired keeps the partial output as bytes even with text=True
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", "replace")
    stderr = stderr.strip()
    error_str = f"{error} {stderr}".lower()

    category = ErrorCategory.CONNECTION
    suggestions = [
        f"Run '{' '.join(command)}' manually to see the full output",
        "Verify the Azure CLI is logged in (az account show)",
    ]

    if isinstance(error, OSError):
        category = ErrorCategory.CONFIGURATION
        suggestions.insert(0, f"Verify '{program}' is installed and on PATH")
        suggestions.insert(1, "Set AZURE_CLI or azure.cli in config.yaml to the full path of the Azure CLI")
    elif "timed out" in error_str or "timeout" in error_str:
        category = ErrorCategory.TIMEOUT
        suggestions.insert(0, "Increase command.timeout in config.yaml (or AZURE_COMMAND_TIMEOUT)")

    if "az login" in error_str or "expired" in error_str:
        category = ErrorCategory.AUTHENTICATION
        suggestions.insert(0, "Run 'az login' to refresh the Azure CLI session")
    elif "authorizationfailed" in error_str or "does not have authorization" in error_str:
        category = ErrorCategory.PERMISSION
        suggestions.insert(0, "Check the signed-in identity has access to the subscription and resource group")

    details: Dict[str, Any] = {
        "command": " ".join(command),
        "error_type": type(error).__name__,
    }
    if returncode is not None:
        details["returncode"] = returncode
    if stderr:
        details["stderr"] = _excerpt(stderr)

    return InvocationError(
        f"Command failed: {program} {' '.join(command[1:3])}".rstrip(),
        command=command,
        returncode=returncode,
        stderr=stderr,
        category=category,
        suggestions=suggestions,
        details=details,
    )


def create_decode_error(kind: str, output: str, reason: str) -> DecodeError:
    """Create actionable error for CLI output that does not match the expected shape"""
    return DecodeError(
        f"Could not decode {kind} from Azure CLI output: {reason}",
        kind=kind,
        category=ErrorCategory.RESOURCE,
        suggestions=[
            "Verify the installed Azure CLI version supports the --query projection used",
            "Check that no extension or az config default changes the output format (core.output)",
        ],
        details={"kind": kind, "output": _excerpt(output)} if output else {"kind": kind},
    )


def create_credential_shape_error(resource_group: str, name: str) -> CredentialShapeError:
    """Create actionable error for a registry credential with no passwords"""
    return CredentialShapeError(
        f"Registry {name} in resource group {resource_group} returned no admin passwords",
        category=ErrorCategory.RESOURCE,
        suggestions=[
            f"Enable the admin user: az acr update -n {name} --admin-enabled true",
            f"Regenerate a password: az acr credential renew -n {name} --password-name password",
        ],
        details={"resource_group": resource_group, "registry": name},
    )

