"""
Pytest configuration file.

Sets up the Python path so test files can import from the python/ directory,
and provides a recording stand-in for the Azure CLI.
"""
import os
import sys
from pathlib import Path

import pytest

# Add python directory to path for all tests
_python_dir = Path(__file__).parent.parent / 'python'
_python_dir_abs = str(_python_dir.absolute())
if _python_dir_abs not in sys.path:
    sys.path.insert(0, _python_dir_abs)

os.environ.setdefault("SKIP_CONFIG_VALIDATION", "true")


class FakeRunner:
    """CommandRunner double answering by argument prefix and recording every request.

    Responses map a tuple of leading args (e.g. ("acr", "list")) to either the
    stdout string to return or an exception instance to raise.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.requests = []

    def execute(self, request):
        self.requests.append(request)
        for prefix, response in self.responses.items():
            if tuple(request.args[: len(prefix)]) == prefix:
                if isinstance(response, Exception):
                    raise response
                return response
        raise AssertionError(f"Unexpected command: {request}")

    def calls(self, *prefix):
        """Requests whose args start with prefix."""
        return [r for r in self.requests if tuple(r.args[: len(prefix)]) == prefix]


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def test_config():
    """ConfigManager with defaults only"""
    from aks_registry.config_manager import ConfigManager

    return ConfigManager(config_file="/nonexistent/config.yaml", validate=False)
