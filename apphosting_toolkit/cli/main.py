"""CLI entrypoint for apphosting-toolkit."""
import sys
import argparse
import logging
import shutil
from pathlib import Path

from apphosting_toolkit import __version__
from apphosting_toolkit.secrets.domains.notifications import NOTIFY_LOGGER_NAME
from .validators import validate_project_number, validate_secret_name, validate_service_account

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logging.getLogger(NOTIFY_LOGGER_NAME).setLevel(logging.INFO)
logger = logging.getLogger(__name__)


def _fail(message: str, code: int = 1) -> None:
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(code)


def cmd_version(args):
    """Show version information."""
    print(f"apphosting-toolkit {__version__}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from apphosting_toolkit.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        _fail(f"Config file does not exist: {config_path}")
    if not config_path.is_file():
        _fail(f"Path is not a file: {config_path}")

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_set_location(args):
    """Set the default replication region for new secrets."""
    from apphosting_toolkit.secrets.domains.preferences import set_preference

    set_preference("default_location", args.location)
    print(f"Default secret location set to: {args.location}")


def cmd_config_show(args):
    """Show current config file path and default location."""
    from apphosting_toolkit.secrets.domains.config_loader import default_config_path
    from apphosting_toolkit.secrets.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")

    location = get_preference("default_location")
    print(f"Default secret location: {location or 'not set (automatic replication)'}")


def cmd_config_clear(args):
    """Clear config path and default location preferences."""
    from apphosting_toolkit.secrets.domains.config_loader import default_config_path
    from apphosting_toolkit.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    clear_preference("default_location")
    print(f"Preferences cleared. Will use default config: {default_config_path()}")


def cmd_config_init(args):
    """Interactive config setup."""
    from apphosting_toolkit.secrets.domains.config_loader import default_config_path
    from apphosting_toolkit.secrets.domains.preferences import set_preference

    default_config = default_config_path()

    print("=== apphosting-toolkit Configuration Setup ===\n")
    print(f"Default config location: {default_config}\n")

    if default_config.exists():
        print(f"Configuration file already exists at: {default_config}")
        return

    print("Choose an option:")
    print("1. Copy an existing config file to default location")
    print("2. Point to an existing config file at a different location")
    print("3. Cancel (manually create config file later)")

    choice = input("\nEnter choice (1-3): ").strip()

    if choice == "1":
        source = Path(input("Enter path to existing config file: ").strip()).expanduser().resolve()
        if not source.exists():
            _fail(f"File not found: {source}")
        default_config.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, default_config)
        print(f"\nConfig copied to: {default_config}")
    elif choice == "2":
        config_file = Path(input("Enter path to config file: ").strip()).expanduser().resolve()
        if not config_file.exists():
            _fail(f"File not found: {config_file}")
        set_preference("config_path", str(config_file))
        print(f"\nConfig path set to: {config_file}")
    elif choice == "3":
        print("\nSetup cancelled.")
        print(f"Create your config file at: {default_config}")
        print("Or use: apphosting-secrets config set-path <path>")
    else:
        _fail("Invalid choice.", code=2)


def _resolve_project_id(args, client) -> str:
    project_id = args.project_id or client.get_project_id()
    if not project_id:
        _fail("Project ID not found. Pass --project-id, set GCP_PROJECT, or configure gcp.project_id")
    return project_id


def _resolve_backend(args, client):
    """Build the Backend from flags, falling back to GCP_PROJECT_NUMBER and config."""
    from apphosting_toolkit.secrets.domains.models import Backend

    if args.service_account:
        validate_service_account(args.service_account)
        return Backend(project_number=args.project_number or "", service_account=args.service_account)

    project_number = args.project_number or client.get_project_number()
    if not project_number:
        _fail(
            "Project number not found. Pass --project-number, set GCP_PROJECT_NUMBER, "
            "or configure gcp.project_number",
            code=2,
        )
    validate_project_number(project_number)
    return Backend(project_number=project_number)


def _make_prompt(args, client):
    from apphosting_toolkit.secrets.domains.prompts import ConsolePrompt, NonInteractivePrompt

    non_interactive = args.non_interactive or bool(client.config_value('prompts', 'non_interactive'))
    if non_interactive or not sys.stdin.isatty():
        return NonInteractivePrompt(answer=args.force)
    return ConsolePrompt()


def cmd_secrets_setup(args):
    """Create or validate a secret and grant a backend access to it."""
    from apphosting_toolkit.secrets.domains.gcp_client import GCPSecretClient
    from apphosting_toolkit.secrets.domains.models import EnsureOutcome
    from apphosting_toolkit.secrets.domains.notifications import LoggingNotifier
    from apphosting_toolkit.secrets.domains.preferences import get_preference
    from apphosting_toolkit.secrets.domains.service_accounts import service_accounts_for_backend
    from apphosting_toolkit.secrets.workflows.backend_secrets import setup_backend_secret

    validate_secret_name(args.secret_name)
    client = GCPSecretClient()
    project_id = _resolve_project_id(args, client)
    backend = _resolve_backend(args, client)
    default_location = get_preference("default_location") or client.get_default_location()

    outcome = setup_backend_secret(
        project_id,
        backend.project_number,
        backend,
        args.secret_name,
        secret_store=client,
        policy_store=client,
        prompt=_make_prompt(args, client),
        notifier=LoggingNotifier(),
        location=args.location,
        default_location=default_location,
    )

    if not outcome.usable:
        print(f"Aborted: secret '{args.secret_name}' was not set up", file=sys.stderr)
        sys.exit(1)

    accounts = service_accounts_for_backend(backend.project_number, backend)
    state = "created" if outcome is EnsureOutcome.CREATED else "already existed"
    print(f"Secret '{args.secret_name}' {state} in project {project_id}")
    print(f"Access granted to: {', '.join(accounts)}")


def cmd_secrets_grant_access(args):
    """Grant service accounts access to an existing secret."""
    from apphosting_toolkit.secrets.domains.gcp_client import GCPSecretClient
    from apphosting_toolkit.secrets.domains.notifications import LoggingNotifier
    from apphosting_toolkit.secrets.workflows.iam_bindings import grant_secret_access

    validate_secret_name(args.secret_name)
    for account in args.service_account:
        validate_service_account(account)

    client = GCPSecretClient()
    project_id = _resolve_project_id(args, client)
    grant_secret_access(
        project_id,
        args.secret_name,
        args.service_account,
        policy_store=client,
        notifier=LoggingNotifier(),
    )


def cmd_secrets_service_accounts(args):
    """Print the service accounts a backend runs as."""
    from apphosting_toolkit.secrets.domains.gcp_client import GCPSecretClient
    from apphosting_toolkit.secrets.domains.service_accounts import service_accounts_for_backend

    backend = _resolve_backend(args, GCPSecretClient())
    for account in service_accounts_for_backend(backend.project_number, backend):
        print(account)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apphosting-secrets",
        description="Provision Secret Manager secrets for App Hosting backends",
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (permissions, network, aborted setup, etc.)
  2 - Usage error (invalid arguments, invalid secret name, etc.)

Environment variables:
  GCP_PROJECT        - GCP project ID (overrides config file)
  GCP_PROJECT_NUMBER - GCP project number (overrides config file)

Configuration:
  Default location: ~/.config/apphosting-toolkit/config.yml
  Custom path: Set with 'apphosting-secrets config set-path <path>'
  View current: Run 'apphosting-secrets config show'
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("version", help="Show version information")

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage apphosting-toolkit configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/apphosting-toolkit/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_set_location_parser = config_subparsers.add_parser(
        "set-location",
        help="Set default region for new secrets",
        description="Pin newly created secrets to a single region unless --location is given"
    )
    config_set_location_parser.add_argument("location", help="Region, e.g. us-central1")

    config_subparsers.add_parser("show", help="Show current config path and defaults")
    config_subparsers.add_parser("clear", help="Clear stored preferences")
    config_subparsers.add_parser("init", help="Interactive config setup")

    # secrets command
    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret management operations",
        description="Manage App Hosting secrets in GCP Secret Manager"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    setup_parser = secrets_subparsers.add_parser(
        "setup",
        help="Create a secret and grant a backend access",
        description="""
Create the secret if it doesn't exist, or validate it if it does, then grant
the backend's service accounts the accessor and viewer roles on it.

If the secret is currently managed by Cloud Functions for Firebase you will be
asked to confirm taking it over. In non-interactive mode the answer is no
unless --force is given.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    setup_parser.add_argument("secret_name", help="Name of the secret (format: [a-zA-Z0-9_-]+)")
    setup_parser.add_argument("--project-id", help="GCP project ID")
    setup_parser.add_argument("--project-number", help="GCP project number (for default service accounts)")
    setup_parser.add_argument("--service-account", help="The backend's explicit service account")
    setup_parser.add_argument("--location", help="Region the secret must be pinned to (new secrets are created there; existing ones must match)")
    setup_parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; decline ownership transfers unless --force is given"
    )
    setup_parser.add_argument(
        "--force",
        action="store_true",
        help="In non-interactive mode, accept ownership transfers"
    )

    grant_parser = secrets_subparsers.add_parser(
        "grant-access",
        help="Grant service accounts access to a secret",
        description="Append accessor and viewer bindings for the given service accounts"
    )
    grant_parser.add_argument("secret_name", help="Name of the secret")
    grant_parser.add_argument("--project-id", help="GCP project ID")
    grant_parser.add_argument(
        "--service-account",
        action="append",
        required=True,
        help="Service account email (repeatable)"
    )

    accounts_parser = secrets_subparsers.add_parser(
        "service-accounts",
        help="Show the service accounts a backend runs as"
    )
    accounts_parser.add_argument("--project-number", help="GCP project number")
    accounts_parser.add_argument("--service-account", help="The backend's explicit service account")

    return parser


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (permissions, network, aborted setup, etc.)
        2 - Usage errors (invalid arguments, invalid secret name format, etc.)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    handlers = {
        ("version", None): cmd_version,
        ("config", "set-path"): cmd_config_set_path,
        ("config", "set-location"): cmd_config_set_location,
        ("config", "show"): cmd_config_show,
        ("config", "clear"): cmd_config_clear,
        ("config", "init"): cmd_config_init,
        ("secrets", "setup"): cmd_secrets_setup,
        ("secrets", "grant-access"): cmd_secrets_grant_access,
        ("secrets", "service-accounts"): cmd_secrets_service_accounts,
    }
    subcommand = getattr(args, f"{args.command}_command", None)
    handler = handlers.get((args.command, subcommand))
    if handler is None:
        parser.print_help()
        sys.exit(2)

    try:
        handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
