"""
terracmd command-line interface.

Each sub-command is a thin shell over one library operation and prints
its result as JSON on stdout. Logs go to stderr.
"""

import argparse
import json
import logging
import sys
from typing import Any, Callable, List, Optional

from . import __version__
from .api import TerraformCloud
from .config.settings import ApiSettings, Settings
from .core.state_importer import SUPPORTED_RESOURCE_TYPES, StateImporter
from .core.tfvars_handler import TfvarsHandler
from .core.variable import VariableCategory, WorkspaceVariable, load_variables
from .errors import ConfigurationMissing, TerraCmdError, ValidationFailed
from .utils import setup_logging, validate_terraform_installed

logger = logging.getLogger(__name__)


def _print_json(result: Any) -> None:
    if result is None:
        return
    print(json.dumps(result, indent=2, default=str))


def _variable_from_args(args: argparse.Namespace) -> WorkspaceVariable:
    return WorkspaceVariable(
        key=args.key,
        value=args.value,
        description=args.description,
        category=args.category,
        hcl=args.hcl,
        sensitive=args.sensitive,
    )


def _load_variable_file(path: str, category: str, sensitive: List[str]) -> List[WorkspaceVariable]:
    if path.endswith(".tfvars"):
        return TfvarsHandler.load(path, VariableCategory.parse(category), sensitive)
    return load_variables(path)


# --- API sub-commands --------------------------------------------------------

def _run_org_create(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.organizations.create(args.name, args.email)


def _run_workspace_create(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.workspaces.create(
        args.name,
        organization=args.organization,
        working_directory=args.working_directory,
        vcs_identifier=args.vcs_identifier,
        repository=args.repository,
        oauth_token_id=args.oauth_token_id,
        global_remote_state=not args.no_global_remote_state,
    )


def _run_workspace_get(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.workspaces.get(name=args.name, organization=args.organization)


def _run_workspace_delete(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.workspaces.delete(args.workspace_id)


def _run_var_create(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.variables.create(args.workspace_id, _variable_from_args(args))


def _run_var_import(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    variables = _load_variable_file(args.file, args.category, args.sensitive)
    return tfc.variables.create_many(args.workspace_id, variables)


def _run_var_list(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.variables.list(args.workspace_id)


def _run_var_update(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.variables.update(args.workspace_id, args.variable_id, _variable_from_args(args))


def _run_var_delete(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.variables.delete(args.workspace_id, args.variable_id)


def _run_oauth_clients(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.oauth.list_clients(args.organization)


def _run_oauth_tokens(tfc: TerraformCloud, args: argparse.Namespace) -> Any:
    return tfc.oauth.list_tokens(args.oauth_client_id)


# --- Local sub-commands ------------------------------------------------------

def _run_import_state(settings: ApiSettings, args: argparse.Namespace) -> Any:
    installed, version = validate_terraform_installed(settings.terraform_binary)
    if not installed:
        raise ConfigurationMissing(
            "terraform binary", f"'{settings.terraform_binary}' was not found on PATH"
        )
    logger.debug(f"Using {version}")

    importer = StateImporter(args.dir, settings.terraform_binary)
    results = importer.import_resources(
        args.resource_ids,
        args.resource_type,
        show=args.show,
        remove_state=args.remove_state,
    )
    return [result.output_path for result in results]


def _run_config_show(settings_store: Settings, args: argparse.Namespace) -> Any:
    return settings_store.as_dict()


def _run_config_set(settings_store: Settings, args: argparse.Namespace) -> Any:
    if args.key == "token" or args.key.startswith("token."):
        raise ValidationFailed("The API token is only read from the TFC_TOKEN environment variable")
    settings_store.set(args.key, args.value)
    settings_store.save()
    return None


# --- Parser ------------------------------------------------------------------

def _add_variable_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("key")
    parser.add_argument("--value", default="")
    parser.add_argument("--description", default="")
    parser.add_argument(
        "--category",
        choices=[c.value for c in VariableCategory],
        default=VariableCategory.TERRAFORM.value,
    )
    parser.add_argument("--hcl", action="store_true", help="Parse value as HCL")
    parser.add_argument("--sensitive", action="store_true", help="Write-only value")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="terracmd",
        description="Manage Terraform Cloud organizations, workspaces and variables.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", action="store_true", help="Also log to a file")
    subparsers = parser.add_subparsers(dest="group", required=True)

    # org
    org = subparsers.add_parser("org", help="Organizations")
    org_sub = org.add_subparsers(dest="action", required=True)
    p = org_sub.add_parser("create")
    p.add_argument("name")
    p.add_argument("email")
    p.set_defaults(api_handler=_run_org_create)

    # workspace
    ws = subparsers.add_parser("workspace", help="Workspaces")
    ws_sub = ws.add_subparsers(dest="action", required=True)
    p = ws_sub.add_parser("create")
    p.add_argument("name")
    p.add_argument("--organization")
    p.add_argument("--working-directory", default="/src")
    p.add_argument("--vcs-identifier")
    p.add_argument("--repository")
    p.add_argument("--oauth-token-id")
    p.add_argument("--no-global-remote-state", action="store_true")
    p.set_defaults(api_handler=_run_workspace_create)

    p = ws_sub.add_parser("get")
    p.add_argument("--name", help="Return only the id of this workspace")
    p.add_argument("--organization")
    p.set_defaults(api_handler=_run_workspace_get)

    p = ws_sub.add_parser("delete")
    p.add_argument("workspace_id")
    p.set_defaults(api_handler=_run_workspace_delete)

    # var
    var = subparsers.add_parser("var", help="Workspace variables")
    var_sub = var.add_subparsers(dest="action", required=True)
    p = var_sub.add_parser("create")
    p.add_argument("workspace_id")
    _add_variable_arguments(p)
    p.set_defaults(api_handler=_run_var_create)

    p = var_sub.add_parser("import", help="Create variables from a JSON or .tfvars file")
    p.add_argument("workspace_id")
    p.add_argument("file")
    p.add_argument(
        "--category",
        choices=[c.value for c in VariableCategory],
        default=VariableCategory.TERRAFORM.value,
        help="Category for .tfvars entries",
    )
    p.add_argument(
        "--sensitive",
        action="append",
        default=[],
        metavar="NAME",
        help="Mark a .tfvars entry sensitive (repeatable)",
    )
    p.set_defaults(api_handler=_run_var_import)

    p = var_sub.add_parser("list")
    p.add_argument("workspace_id")
    p.set_defaults(api_handler=_run_var_list)

    p = var_sub.add_parser("update")
    p.add_argument("workspace_id")
    p.add_argument("variable_id")
    _add_variable_arguments(p)
    p.set_defaults(api_handler=_run_var_update)

    p = var_sub.add_parser("delete")
    p.add_argument("workspace_id")
    p.add_argument("variable_id")
    p.set_defaults(api_handler=_run_var_delete)

    # oauth
    oauth = subparsers.add_parser("oauth", help="VCS OAuth connections")
    oauth_sub = oauth.add_subparsers(dest="action", required=True)
    p = oauth_sub.add_parser("clients")
    p.add_argument("--organization")
    p.set_defaults(api_handler=_run_oauth_clients)

    p = oauth_sub.add_parser("tokens")
    p.add_argument("oauth_client_id")
    p.set_defaults(api_handler=_run_oauth_tokens)

    # import-state
    p = subparsers.add_parser(
        "import-state", help="Import existing Azure resources into local state"
    )
    p.add_argument("resource_type", choices=sorted(SUPPORTED_RESOURCE_TYPES), metavar="TYPE")
    p.add_argument("resource_ids", nargs="+", metavar="ID")
    p.add_argument("--show", action="store_true", help="Print terraform show output")
    p.add_argument("--remove-state", action="store_true", help="Delete terraform.tfstate afterwards")
    p.add_argument("--dir", default=".", help="Working directory")
    p.set_defaults(local_handler=_run_import_state)

    # config
    cfg = subparsers.add_parser("config", help="Persistent defaults")
    cfg_sub = cfg.add_subparsers(dest="action", required=True)
    p = cfg_sub.add_parser("show")
    p.set_defaults(config_handler=_run_config_show)
    p = cfg_sub.add_parser("set")
    p.add_argument("key", help="Dotted key, e.g. organization or vcs.project")
    p.add_argument("value")
    p.set_defaults(config_handler=_run_config_set)

    return parser


def main(
    argv: Optional[List[str]] = None,
    tfc_factory: Callable[[ApiSettings], TerraformCloud] = TerraformCloud,
) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return int(e.code or 0)

    setup_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        settings_store = Settings()
        if getattr(args, "config_handler", None):
            result = args.config_handler(settings_store, args)
        else:
            settings = ApiSettings.from_environment(settings=settings_store)
            if getattr(args, "local_handler", None):
                result = args.local_handler(settings, args)
            else:
                with tfc_factory(settings) as tfc:
                    result = args.api_handler(tfc, args)
    except TerraCmdError as e:
        logger.error(str(e))
        return 1
    except (OSError, ValueError) as e:
        # Unreadable or unparseable input files
        logger.error(str(e))
        return 1

    _print_json(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
