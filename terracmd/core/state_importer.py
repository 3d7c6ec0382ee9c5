"""
Import existing Azure resources into local Terraform state.

For each resource id the importer writes a throwaway configuration with an
empty resource block, runs terraform init and import against it, and
saves the `terraform show` rendering of the resulting state to a text
file next to it.
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Iterable, List, Mapping, Optional

from ..errors import ValidationFailed
from ..security.sanitizer import InputSanitizer
from ..security.secure_memory import OutputRedactor, SecureString
from ..utils.files import remove_if_exists
from .terraform_runner import TerraformRunner

logger = logging.getLogger(__name__)

PROVIDER_NAME = "azurerm"

STATE_FILE = "terraform.tfstate"

# Provider credentials read from the environment; masked in terraform output
PROVIDER_SECRET_ENV_VARS = (
    "ARM_CLIENT_SECRET",
    "ARM_CLIENT_CERTIFICATE_PASSWORD",
    "ARM_ACCESS_KEY",
    "ARM_SAS_TOKEN",
)

# Resource types that can be imported, without the provider prefix
SUPPORTED_RESOURCE_TYPES = frozenset({
    "api_management",
    "app_service",
    "app_service_plan",
    "application_gateway",
    "application_insights",
    "availability_set",
    "container_group",
    "container_registry",
    "cosmosdb_account",
    "data_factory",
    "dns_zone",
    "eventhub",
    "eventhub_namespace",
    "firewall",
    "function_app",
    "key_vault",
    "key_vault_secret",
    "kubernetes_cluster",
    "lb",
    "linux_virtual_machine",
    "linux_web_app",
    "log_analytics_workspace",
    "managed_disk",
    "mssql_database",
    "mssql_server",
    "mysql_flexible_server",
    "network_interface",
    "network_security_group",
    "network_security_rule",
    "postgresql_flexible_server",
    "private_dns_zone",
    "private_endpoint",
    "public_ip",
    "recovery_services_vault",
    "redis_cache",
    "resource_group",
    "role_assignment",
    "route_table",
    "search_service",
    "servicebus_namespace",
    "servicebus_queue",
    "servicebus_topic",
    "sql_database",
    "sql_server",
    "storage_account",
    "storage_container",
    "subnet",
    "user_assigned_identity",
    "virtual_machine",
    "virtual_network",
    "virtual_network_gateway",
    "virtual_network_peering",
    "windows_virtual_machine",
    "windows_web_app",
})

TEMPLATE = """provider "{provider}" {{
  features {{}}
}}

resource "{provider}_{resource_type}" "{name}" {{}}
"""


@dataclass(frozen=True)
class ImportPaths:
    """File names and Terraform address derived from one resource id."""
    base_name: str
    template: str
    output: str
    address: str

    @classmethod
    def for_resource(cls, resource_id: str, resource_type: str, directory: str = ".") -> "ImportPaths":
        """
        Derive paths for a resource.

        "/subscriptions/x/.../sa1" with type "storage_account" gives the
        template "subscriptions_x_..._sa1-storage_account-temp.tf" and the
        output "subscriptions_x_..._sa1-storage_account.txt".
        """
        sanitized = InputSanitizer.sanitize_resource_id(resource_id)
        base_name = f"{sanitized}-{resource_type}"
        name = InputSanitizer.to_resource_name(sanitized)
        return cls(
            base_name=base_name,
            template=os.path.join(directory, f"{base_name}-temp.tf"),
            output=os.path.join(directory, f"{base_name}.txt"),
            address=f"{PROVIDER_NAME}_{resource_type}.{name}",
        )


@dataclass
class ImportResult:
    """Outcome of one import cycle."""
    resource_id: str
    resource_type: str
    template_path: str
    output_path: str


def provider_redactor(environ: Optional[Mapping[str, str]] = None) -> OutputRedactor:
    """Build a redactor for the provider credentials set in the environment."""
    env = os.environ if environ is None else environ
    return OutputRedactor(
        SecureString(env[name]) for name in PROVIDER_SECRET_ENV_VARS if env.get(name)
    )


def validate_resource_type(resource_type: str) -> str:
    """Raise ValidationFailed unless resource_type is in the allow-list."""
    if resource_type not in SUPPORTED_RESOURCE_TYPES:
        raise ValidationFailed(
            f"Unsupported resource type {resource_type!r}; "
            f"expected one of: {', '.join(sorted(SUPPORTED_RESOURCE_TYPES))}"
        )
    return resource_type


class StateImporter:
    """
    Runs import cycles for resources, one at a time.

    The terraform state file in the working directory accumulates every
    imported resource unless remove_state is requested.

    When the importer builds its own runner, provider credentials found in
    the environment are redacted from everything terraform prints,
    including the saved show output.
    """

    def __init__(
        self,
        working_dir: str = ".",
        terraform_binary: str = "terraform",
        runner: Optional[TerraformRunner] = None,
        display: Callable[[str], None] = print,
        redactor: Optional[OutputRedactor] = None,
    ):
        self.working_dir = os.path.abspath(working_dir)
        if runner is None:
            runner = TerraformRunner(self.working_dir, terraform_binary)
            runner.set_redactor(redactor or provider_redactor())
        self.runner = runner
        self.display = display

    @property
    def state_path(self) -> str:
        return os.path.join(self.working_dir, STATE_FILE)

    def import_resource(
        self,
        resource_id: str,
        resource_type: str,
        show: bool = False,
        remove_state: bool = False,
    ) -> ImportResult:
        """
        Import one resource and dump its configuration to a text file.

        Args:
            resource_id: Remote identifier, e.g. an Azure resource id
            resource_type: Allow-listed type such as "storage_account"
            show: Also stream `terraform show` output to the display callback
            remove_state: Delete the local state file afterwards

        Raises:
            ValidationFailed: Unsupported type or unusable id; nothing was touched
            ExternalToolFailed: A terraform sub-command failed; later steps
                were skipped
        """
        validate_resource_type(resource_type)
        paths = ImportPaths.for_resource(resource_id, resource_type, self.working_dir)

        logger.info(f"Importing {resource_type} {resource_id}")

        remove_if_exists(paths.template)
        remove_if_exists(paths.output)

        with open(paths.template, "w") as f:
            f.write(TEMPLATE.format(
                provider=PROVIDER_NAME,
                resource_type=resource_type,
                name=paths.address.split(".", 1)[1],
            ))

        self.runner.init().check()
        self.runner.import_resource(paths.address, resource_id).check()

        if show:
            self.runner.show(output_callback=self.display).check()

        result = self.runner.show().check()
        with open(paths.output, "w") as f:
            f.write(result.stdout)
            if result.stdout:
                f.write("\n")

        remove_if_exists(paths.template)
        if remove_state:
            remove_if_exists(self.state_path)
            remove_if_exists(f"{self.state_path}.backup")

        logger.info(f"Wrote {paths.output}")
        return ImportResult(
            resource_id=resource_id,
            resource_type=resource_type,
            template_path=paths.template,
            output_path=paths.output,
        )

    def import_resources(
        self,
        resource_ids: Iterable[str],
        resource_type: str,
        show: bool = False,
        remove_state: bool = False,
    ) -> List[ImportResult]:
        """Run one import cycle per id, in order. Stops at the first failure."""
        validate_resource_type(resource_type)
        return [
            self.import_resource(resource_id, resource_type, show, remove_state)
            for resource_id in resource_ids
        ]
