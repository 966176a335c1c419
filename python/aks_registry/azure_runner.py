"""
Azure CLI facade for finding an AKS cluster and its container registry.

The resolver lists clusters and registries through `az`, creates a registry
named after the cluster when none matches, and returns a Docker auth document
built from the registry's admin credential.
"""

from typing import List, Optional, Tuple

from aks_registry.command_runner import CommandRequest, CommandRunner, SubprocessRunner
from aks_registry.config_manager import ConfigManager, config_manager as default_config_manager
from aks_registry.docker_config import build_auth_document
from aks_registry.error_utils import InvocationError, create_credential_shape_error
from aks_registry.logging_utils import get_logger
from aks_registry.models import (
    ClusterIdentity,
    LookupStatus,
    RegistryLookupResult,
    RegistryResolution,
    parse_cluster_list,
    parse_registry_credential,
    parse_registry_list,
)

logger = get_logger(__name__)

CLUSTER_QUERY = "[].{uri:fqdn,id:servicePrincipalProfile.clientId,group:resourceGroup,name:name}"
REGISTRY_QUERY = "[].{uri:loginServer,id:id,name:name,group:resourceGroup}"


def _with_subscription(args: List[str], subscription: Optional[str]) -> List[str]:
    if subscription:
        args.extend(["--subscription", subscription])
    return args


class AzureRunner:
    """Azure CLI runner to interact with AKS and ACR."""

    def __init__(self, runner: Optional[CommandRunner] = None, config_manager: Optional[ConfigManager] = None):
        """Initialize AzureRunner

        Args:
            runner: Command runner for az calls (defaults to a SubprocessRunner)
            config_manager: ConfigManager instance (defaults to the module-level one)
        """
        self.config_manager = config_manager or default_config_manager
        self.runner = runner or SubprocessRunner(timeout=self.config_manager.get_command_timeout())

    def azure_cli(self, *args: str) -> str:
        request = CommandRequest(program=self.config_manager.get_cli(), args=tuple(args))
        return self.runner.execute(request)

    def get_cluster_client(self, server: str) -> ClusterIdentity:
        """Return the resource group, name and client ID of the AKS cluster serving server.

        Args:
            server: API server URL, e.g. https://myclus-dns-1234.hcp.eastus.azmk8s.io:443

        Returns:
            ClusterIdentity; all fields are empty strings when no cluster matches
        """
        output = self.azure_cli("aks", "list", "--query", CLUSTER_QUERY)
        for cluster in parse_cluster_list(output):
            if cluster.server == server:
                return ClusterIdentity(cluster.group, cluster.name, cluster.id)
        return ClusterIdentity("", "", "")

    def get_registry(
        self,
        subscription: Optional[str],
        resource_group: str,
        name: str,
        registry: Optional[str] = None,
    ) -> RegistryResolution:
        """Return the Docker config, login server and resource ID of a cluster's registry.

        Registries outside the managed domain are passed through untouched. A
        managed registry that cannot be found is created in the cluster's
        resource group under the cluster's name.

        Args:
            subscription: Subscription holding the registry (None for the CLI default)
            resource_group: Resource group of the cluster
            name: Name of the cluster
            registry: Explicit login server; defaults to <name>.<registry domain>

        Raises:
            InvocationError: If creating the registry or reading its credential fails
            DecodeError: If a CLI reply cannot be decoded
            CredentialShapeError: If the registry has no admin passwords
        """
        login_server = registry or self.config_manager.format_login_server(name)

        if not login_server.endswith(self.config_manager.get_registry_domain()):
            return RegistryResolution("", login_server, "")

        lookup = self.lookup_registry(subscription, login_server)
        acr_group, acr_name, registry_id = lookup.resource_group, lookup.name, lookup.registry_id

        if not lookup.found:
            acr_group, acr_name = resource_group, name
            registry_id, login_server = self.create_registry(subscription, acr_group, acr_name)

        docker_config = self.get_registry_credential(subscription, acr_group, acr_name)
        return RegistryResolution(docker_config, login_server, registry_id)

    def lookup_registry(self, subscription: Optional[str], login_server: str) -> RegistryLookupResult:
        """Find a registry by exact login server.

        A failed `az acr list` is reported as LIST_FAILED rather than raised, so
        the caller can fall back to creating the registry.
        """
        args = _with_subscription(["acr", "list", "--query", REGISTRY_QUERY], subscription)
        try:
            output = self.azure_cli(*args)
        except InvocationError as e:
            logger.info(f"Registry {login_server} does not exist")
            return RegistryLookupResult(LookupStatus.LIST_FAILED, error=e)

        for record in parse_registry_list(output):
            if record.uri == login_server:
                return RegistryLookupResult(LookupStatus.FOUND, record=record)
        return RegistryLookupResult(LookupStatus.NOT_FOUND)

    def create_registry(self, subscription: Optional[str], resource_group: str, name: str) -> Tuple[str, str]:
        """Create a registry with the admin user enabled.

        Returns:
            Tuple of (resource ID, login server)
        """
        args = _with_subscription(
            [
                "acr",
                "create",
                "-g",
                resource_group,
                "-n",
                name,
                "--sku",
                self.config_manager.get_registry_sku(),
                "--admin-enabled",
                "--query",
                "id",
                "-o",
                "tsv",
            ],
            subscription,
        )
        logger.info(f"Creating registry {name} in resource group {resource_group}")
        try:
            registry_id = self.azure_cli(*args)
        except InvocationError:
            logger.info(f"Failed to create registry {name} in resource group {resource_group}")
            raise
        return registry_id, self.config_manager.format_login_server(name)

    def get_registry_credential(self, subscription: Optional[str], resource_group: str, name: str) -> str:
        """Return a serialized Docker config holding the registry's first admin password."""
        args = _with_subscription(["acr", "credential", "show", "-g", resource_group, "-n", name], subscription)
        try:
            output = self.azure_cli(*args)
        except InvocationError:
            logger.info(f"Failed to get credential for registry {name} in resource group {resource_group}")
            raise

        credential = parse_registry_credential(output)
        if not credential.passwords:
            raise create_credential_shape_error(resource_group, name)

        return build_auth_document(
            self.config_manager.format_login_server(name),
            credential.username,
            credential.passwords[0].value,
        )

    def assign_role(self, client: str, registry: str) -> bool:
        """Grant the client the reader role on a registry, best effort.

        Failures are logged and discarded.

        Returns:
            True if the role assignment command succeeded
        """
        if not client or not registry:
            return False
        role = self.config_manager.get_reader_role()
        try:
            self.azure_cli("role", "assignment", "create", "--assignee", client, "--role", role, "--scope", registry)
        except InvocationError as e:
            logger.warning(f"Could not assign {role} on {registry} to {client}: {e.message}")
            return False
        return True
