"""Abstract collaborators the secret workflows are built on.

Implementations live in ``gcp_client`` (Secret Manager), ``notifications``
(logging) and ``prompts`` (terminal). Tests swap in in-memory fakes.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from .models import Policy, Secret


class SecretStore(ABC):
    """Reads and writes secret metadata."""

    @abstractmethod
    def get_secret(self, project: str, name: str) -> Secret:
        """Fetch a secret. Raises an error with status code 404 if it does not exist."""
        pass

    @abstractmethod
    def create_secret(
        self,
        project: str,
        name: str,
        labels: Dict[str, str],
        location: Optional[str] = None,
    ) -> None:
        """Create a secret, pinned to ``location`` if given, else automatically replicated."""
        pass

    @abstractmethod
    def patch_secret(self, project: str, name: str, labels: Dict[str, str]) -> None:
        """Replace a secret's labels."""
        pass


class PolicyStore(ABC):
    """Reads and writes IAM policies on secrets."""

    @abstractmethod
    def get_iam_policy(self, project: str, name: str) -> Policy:
        pass

    @abstractmethod
    def set_iam_policy(self, project: str, name: str, policy: Policy) -> None:
        pass


class ConfirmationPrompt(ABC):
    """Asks a human a yes/no question."""

    @abstractmethod
    def confirm(self, message: str, default: bool = False) -> bool:
        pass


class NotificationSink(ABC):
    """User-facing status messages. Implementations must never raise."""

    @abstractmethod
    def log_success(self, message: str) -> None:
        pass

    @abstractmethod
    def log_labeled_warning(self, label: str, message: str) -> None:
        pass

    @abstractmethod
    def log_labeled_error(self, label: str, message: str) -> None:
        pass
