import logging
import os
from typing import List, Optional, Sequence

SECRET_FLAGS = ("--password", "-p", "--client-secret", "--secret")


def setup_logging(level: Optional[int] = None, fmt: Optional[str] = None) -> None:
    """Configure root logging once. Subsequent calls are no-ops.
    If level is not provided, LOG_LEVEL from the environment is used (default INFO).
    """
    if logging.getLogger().handlers:
        # Already configured; do nothing
        return
    if level is None:
        level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    format_str = fmt or '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
    logging.basicConfig(level=level, format=format_str)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module/logger by name, after ensuring logging is configured."""
    setup_logging()
    return logging.getLogger(name) if name else logging.getLogger("aks_registry")


def redact_args(args: Sequence[str]) -> List[str]:
    """Return a copy of a command line with the values of secret-bearing flags masked."""
    redacted = list(args)
    for i, token in enumerate(redacted):
        if token in SECRET_FLAGS and i + 1 < len(redacted):
            redacted[i + 1] = "****"
    return redacted
