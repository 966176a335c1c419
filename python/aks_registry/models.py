"""
Value records for Azure CLI replies and the decoders that build them.

Each decoder validates one response shape independently of the process call,
so decode failures can be exercised with plain strings.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from aks_registry.error_utils import ActionableError, create_decode_error


@dataclass(frozen=True)
class ClusterRecord:
    """One AKS cluster as projected by `az aks list`."""

    id: str
    uri: str
    group: str
    name: str

    @property
    def server(self) -> str:
        """API server URL as written in a kubeconfig."""
        return f"https://{self.uri}:443"


@dataclass(frozen=True)
class RegistryRecord:
    """One container registry as projected by `az acr list`."""

    id: str
    uri: str
    group: str
    name: str


@dataclass(frozen=True)
class CredentialPassword:
    name: str
    value: str


@dataclass(frozen=True)
class RegistryCredential:
    username: str
    passwords: Tuple[CredentialPassword, ...] = ()


class ClusterIdentity(NamedTuple):
    resource_group: str
    name: str
    client_id: str


class RegistryResolution(NamedTuple):
    docker_config: str
    login_server: str
    registry_id: str


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    LIST_FAILED = "list_failed"


@dataclass(frozen=True)
class RegistryLookupResult:
    """Outcome of searching the registry list for a login server.

    LIST_FAILED is kept apart from NOT_FOUND so callers can tell a missing
    registry from a listing that never ran, even though the resolver falls
    back to creation for both.
    """

    status: LookupStatus
    record: Optional[RegistryRecord] = None
    error: Optional[ActionableError] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def resource_group(self) -> str:
        return self.record.group if self.record else ""

    @property
    def name(self) -> str:
        return self.record.name if self.record else ""

    @property
    def registry_id(self) -> str:
        return self.record.id if self.record else ""


def _load_json(kind: str, text: str, redact: bool = False) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise create_decode_error(kind, "" if redact else text, f"invalid JSON ({e})") from e


def _string_fields(kind: str, text: str, item: Dict[str, Any], names: Tuple[str, ...],
                   redact: bool = False) -> Dict[str, str]:
    """Pick string fields from a JSON object; missing or null fields become ''."""
    values = {}
    for name in names:
        value = item.get(name)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            raise create_decode_error(
                kind, "" if redact else text, f"field '{name}' is {type(value).__name__}, expected string"
            )
        values[name] = value
    return values


def _object_list(kind: str, text: str) -> List[Dict[str, Any]]:
    data = _load_json(kind, text)
    if data is None:
        return []
    if not isinstance(data, list):
        raise create_decode_error(kind, text, f"expected a JSON array, got {type(data).__name__}")
    for item in data:
        if not isinstance(item, dict):
            raise create_decode_error(kind, text, f"expected JSON objects, got {type(item).__name__}")
    return data


def parse_cluster_list(text: str) -> List[ClusterRecord]:
    """Decode the `az aks list` projection {uri, id, group, name}."""
    return [
        ClusterRecord(**_string_fields("cluster list", text, item, ("id", "uri", "group", "name")))
        for item in _object_list("cluster list", text)
    ]


def parse_registry_list(text: str) -> List[RegistryRecord]:
    """Decode the `az acr list` projection {uri, id, name, group}."""
    return [
        RegistryRecord(**_string_fields("registry list", text, item, ("id", "uri", "group", "name")))
        for item in _object_list("registry list", text)
    ]


def parse_registry_credential(text: str) -> RegistryCredential:
    """Decode `az acr credential show` output.

    The raw output carries secrets, so it is never copied into a DecodeError.
    """
    kind = "registry credential"
    data = _load_json(kind, text, redact=True)
    if not isinstance(data, dict):
        raise create_decode_error(kind, "", f"expected a JSON object, got {type(data).__name__}")

    username = _string_fields(kind, text, data, ("username",), redact=True)["username"]
    raw_passwords = data.get("passwords")
    if raw_passwords is None:
        raw_passwords = []
    if not isinstance(raw_passwords, list):
        raise create_decode_error(kind, "", f"'passwords' is {type(raw_passwords).__name__}, expected array")

    passwords = []
    for entry in raw_passwords:
        if not isinstance(entry, dict):
            raise create_decode_error(kind, "", "password entries must be JSON objects")
        passwords.append(CredentialPassword(**_string_fields(kind, text, entry, ("name", "value"), redact=True)))

    return RegistryCredential(username=username, passwords=tuple(passwords))


@dataclass(frozen=True)
class AuthEntry:
    auth: str


@dataclass(frozen=True)
class RegistryAuthDocument:
    """Docker config document: {"auths": {"<login server>": {"auth": "<b64>"}}}."""

    auths: Dict[str, AuthEntry] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"auths": {server: {"auth": entry.auth} for server, entry in self.auths.items()}}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))
