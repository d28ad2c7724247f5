"""GCP Secret Manager client wrapper."""
import logging
import os
from typing import Any, Dict, Optional

from google.cloud import secretmanager
from google.iam.v1 import policy_pb2
from google.protobuf import field_mask_pb2

from .config_loader import ConfigError, load_config
from .interfaces import PolicyStore, SecretStore
from .models import Binding, Policy, Secret

logger = logging.getLogger(__name__)

# Lazy loading: defer config loading until a GCP operation needs it so that
# commands like --help run without a config file
_CONFIG: Optional[Dict[str, Any]] = None
_CONFIG_LOADED = False


def _get_config() -> Dict[str, Any]:
    """
    Load configuration on first use and export its credentials.

    Raises:
        ConfigError: If config file is invalid
        FileNotFoundError: If no config file exists
    """
    global _CONFIG, _CONFIG_LOADED

    if not _CONFIG_LOADED:
        _CONFIG = load_config()
        _CONFIG_LOADED = True

        service_account_path = _CONFIG['authentication']['service_account_path']
        os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = service_account_path
        logger.info(f"Set GOOGLE_APPLICATION_CREDENTIALS from config: {service_account_path}")

    return _CONFIG


def secret_resource_name(project: str, name: str) -> str:
    return f"projects/{project}/secrets/{name}"


class GCPSecretClient(SecretStore, PolicyStore):
    """Secret and IAM policy store backed by Secret Manager."""

    def __init__(self, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            _get_config()
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def config_value(self, section: str, key: str) -> Optional[Any]:
        """Read an optional config setting. Returns None if unset or the config can't be loaded."""
        try:
            config = _get_config()
        except (ConfigError, FileNotFoundError) as e:
            logger.error(f"Failed to load config: {e}")
            return None
        return (config.get(section) or {}).get(key)

    def get_project_id(self) -> Optional[str]:
        """
        Get GCP project ID.

        Priority order:
        1. GCP_PROJECT environment variable
        2. gcp.project_id in the config file
        """
        gcp_project_env = os.getenv("GCP_PROJECT")
        if gcp_project_env:
            logger.debug(f"Using GCP_PROJECT from environment: {gcp_project_env}")
            return gcp_project_env

        project_id = self.config_value('gcp', 'project_id')
        if project_id:
            logger.debug(f"Using project_id from config: {project_id}")
            return project_id

        logger.error("Project ID not found. Please set GCP_PROJECT environment variable or configure project_id in config file")
        return None

    def get_project_number(self) -> Optional[str]:
        """
        Get GCP project number.

        Priority order:
        1. GCP_PROJECT_NUMBER environment variable
        2. gcp.project_number in the config file
        """
        project_number_env = os.getenv("GCP_PROJECT_NUMBER")
        if project_number_env:
            logger.debug(f"Using GCP_PROJECT_NUMBER from environment: {project_number_env}")
            return project_number_env

        project_number = self.config_value('gcp', 'project_number')
        if project_number:
            return str(project_number)
        return None

    def get_default_location(self) -> Optional[str]:
        """Replication region for new secrets, from secrets.location in the config file."""
        return self.config_value('secrets', 'location')

    def get_secret(self, project: str, name: str) -> Secret:
        """
        Fetch a secret's metadata.

        Raises:
            google.api_core.exceptions.NotFound: If the secret does not exist
            google.api_core.exceptions.GoogleAPICallError: On any other API failure
        """
        response = self.client.get_secret(request={"name": secret_resource_name(project, name)})
        replicas = response.replication.user_managed.replicas
        return Secret(
            project=project,
            name=name,
            labels=dict(response.labels),
            replica_locations=[replica.location for replica in replicas],
        )

    def create_secret(
        self,
        project: str,
        name: str,
        labels: Dict[str, str],
        location: Optional[str] = None,
    ) -> None:
        if location:
            replication = {"user_managed": {"replicas": [{"location": location}]}}
        else:
            replication = {"automatic": {}}
        self.client.create_secret(
            request={
                "parent": f"projects/{project}",
                "secret_id": name,
                "secret": {"replication": replication, "labels": labels},
            }
        )
        logger.debug(f"Created secret {secret_resource_name(project, name)} (location: {location or 'automatic'})")

    def patch_secret(self, project: str, name: str, labels: Dict[str, str]) -> None:
        self.client.update_secret(
            request={
                "secret": {"name": secret_resource_name(project, name), "labels": labels},
                "update_mask": field_mask_pb2.FieldMask(paths=["labels"]),
            }
        )

    def get_iam_policy(self, project: str, name: str) -> Policy:
        response = self.client.get_iam_policy(request={"resource": secret_resource_name(project, name)})
        return Policy(
            bindings=[Binding(role=b.role, members=list(b.members)) for b in response.bindings]
        )

    def set_iam_policy(self, project: str, name: str, policy: Policy) -> None:
        # No etag: the write replaces whatever policy is current
        pb_policy = policy_pb2.Policy(
            bindings=[
                policy_pb2.Binding(role=b.role, members=list(b.members))
                for b in policy.bindings
            ]
        )
        self.client.set_iam_policy(
            request={"resource": secret_resource_name(project, name), "policy": pb_policy}
        )
