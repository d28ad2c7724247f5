"""Configuration loader for apphosting-toolkit."""
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration error exception."""
    pass


def default_config_path() -> Path:
    return Path.home() / ".config" / "apphosting-toolkit" / "config.yml"


def _get_config_path() -> str:
    """
    Resolve the config file path. Evaluated on every call so preference
    changes apply without restarting.

    Priority order:
    1. ``config_path`` preference
    2. ~/.config/apphosting-toolkit/config.yml

    Raises:
        FileNotFoundError: If no config file exists in either location
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    raise FileNotFoundError(
        "Configuration file not found. Please set up your config file using one of these methods:\n\n"
        "1. Use the default location:\n"
        f"   mkdir -p {default_config.parent}\n"
        f"   cp /path/to/your/config.yml {default_config}\n\n"
        "2. Point to an existing config file:\n"
        "   apphosting-secrets config set-path /path/to/your/config.yml\n\n"
        "3. Run interactive setup:\n"
        "   apphosting-secrets config init\n"
    )


def _validate_authentication(config: Dict[str, Any], config_path: str) -> None:
    if 'authentication' not in config:
        raise ConfigError(
            f"Missing 'authentication' section in config at {config_path}\n"
            f"Required format:\n"
            f"authentication:\n"
            f"  type: service_account\n"
            f"  service_account_path: /path/to/service-account.json"
        )
    auth = config['authentication'] or {}

    if 'type' not in auth:
        raise ConfigError("Missing 'authentication.type' in config")
    if auth['type'] != 'service_account':
        raise ConfigError(
            f"Unsupported authentication type: {auth['type']}\n"
            f"Only 'service_account' is supported."
        )

    service_account_path = auth.get('service_account_path')
    if not service_account_path:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )
    if not os.path.isfile(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )


def _validate_gcp(config: Dict[str, Any], config_path: str) -> None:
    gcp = config.get('gcp')
    if not gcp or 'project_id' not in gcp:
        raise ConfigError(
            f"Missing 'gcp.project_id' in config at {config_path}\n"
            f"Required format:\n"
            f"gcp:\n"
            f"  project_id: your-project-id\n"
            f"  project_number: '123456789012'  # optional"
        )
    project_number = gcp.get('project_number')
    if project_number is not None and not re.match(r'^[0-9]+$', str(project_number)):
        raise ConfigError(f"Invalid 'gcp.project_number' in config: {project_number!r}")


def _validate_optional_sections(config: Dict[str, Any]) -> None:
    secrets = config.get('secrets') or {}
    if not isinstance(secrets, dict):
        raise ConfigError("'secrets' section must be a mapping")
    location = secrets.get('location')
    if location is not None and not isinstance(location, str):
        raise ConfigError(f"'secrets.location' must be a region name, got: {location!r}")

    prompts = config.get('prompts') or {}
    if not isinstance(prompts, dict):
        raise ConfigError("'prompts' section must be a mapping")
    if not isinstance(prompts.get('non_interactive', False), bool):
        raise ConfigError("'prompts.non_interactive' must be true or false")


def load_config() -> Dict[str, Any]:
    """
    Load and validate configuration from YAML.

    Returns:
        Dict with keys:
        - authentication: type and service_account_path
        - gcp: project_id, optional project_number
        - secrets (optional): location for newly created secrets
        - prompts (optional): non_interactive

    Raises:
        ConfigError: If the config is unreadable or invalid
        FileNotFoundError: If no config file exists
    """
    config_path = _get_config_path()

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}") from e

    if not config:
        raise ConfigError(f"Config file at {config_path} is empty")
    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must contain a mapping")

    _validate_authentication(config, config_path)
    _validate_gcp(config, config_path)
    _validate_optional_sections(config)

    if config['gcp'].get('project_number') is not None:
        config['gcp']['project_number'] = str(config['gcp']['project_number'])

    logger.info(f"Configuration loaded successfully from {config_path}")
    logger.debug(f"Using service account: {config['authentication']['service_account_path']}")
    logger.debug(f"Using project ID: {config['gcp']['project_id']}")

    return config
