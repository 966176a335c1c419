"""
Helpers for Docker registry auth documents (the .dockerconfigjson format).
"""

import base64
import binascii
import json
from typing import Optional, Tuple

from aks_registry.error_utils import create_decode_error
from aks_registry.logging_utils import get_logger
from aks_registry.models import AuthEntry, RegistryAuthDocument

logger = get_logger(__name__)


def encode_auth(username: str, password: str) -> str:
    """Base64 of "username:password", as stored in an auths entry."""
    return base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")


def build_auth_document(login_server: str, username: str, password: str) -> str:
    """Return a serialized auth document holding one entry for login_server."""
    document = RegistryAuthDocument(auths={login_server: AuthEntry(auth=encode_auth(username, password))})
    return document.to_json()


def _host(url: str) -> str:
    # Normalize registry URL for matching (remove protocol, path and port)
    url = url.replace("https://", "").replace("http://", "")
    return url.split("/")[0].split(":")[0]


def read_auth_document(text: str, login_server: str) -> Tuple[Optional[str], Optional[str]]:
    """Read username and password for a registry out of an auth document.

    Args:
        text: Serialized document with an "auths" section.
        login_server: Registry to look up; matched by hostname, port ignored.

    Returns:
        Tuple of (username, password) - both None if no entry matches
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise create_decode_error("registry auth document", "", f"invalid JSON ({e})") from e

    auths = document.get("auths") if isinstance(document, dict) else None
    if not isinstance(auths, dict):
        logger.debug("No 'auths' section in registry auth document")
        return None, None

    registry_host = _host(login_server)
    for auth_url, auth_data in auths.items():
        if _host(auth_url) != registry_host or not isinstance(auth_data, dict):
            continue

        username = auth_data.get("username")
        password = auth_data.get("password")

        # Fall back to the base64 'auth' field
        if (not username or not password) and "auth" in auth_data:
            try:
                decoded = base64.b64decode(auth_data["auth"], validate=True).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError, TypeError) as e:
                raise create_decode_error("registry auth document", "", f"bad auth field for {auth_url}") from e
            if ":" in decoded:
                decoded_user, decoded_pass = decoded.split(":", 1)
                username = username or decoded_user
                password = password or decoded_pass

        if username or password:
            return username, password

    logger.debug(f"No matching registry credentials found for {login_server}")
    return None, None
