"""
Resolve an AKS cluster's identity and its Azure Container Registry through the Azure CLI.
"""

from aks_registry.azure_runner import AzureRunner
from aks_registry.command_runner import CommandRequest, CommandRunner, SubprocessRunner
from aks_registry.error_utils import ActionableError, CredentialShapeError, DecodeError, InvocationError
from aks_registry.models import ClusterIdentity, LookupStatus, RegistryLookupResult, RegistryResolution

__all__ = [
    "AzureRunner",
    "CommandRequest",
    "CommandRunner",
    "SubprocessRunner",
    "ActionableError",
    "InvocationError",
    "DecodeError",
    "CredentialShapeError",
    "ClusterIdentity",
    "LookupStatus",
    "RegistryLookupResult",
    "RegistryResolution",
]
