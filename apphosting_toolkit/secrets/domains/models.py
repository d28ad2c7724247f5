"""Domain models for secret management."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

# Label recording which product manages a secret's versions
FIREBASE_MANAGED = "firebase-managed"
APPHOSTING_MANAGED_VALUE = "apphosting"

SECRET_ACCESSOR_ROLE = "roles/secretmanager.secretAccessor"
SECRET_VIEWER_ROLE = "roles/secretmanager.viewer"
SERVICE_ACCOUNT_PREFIX = "serviceAccount:"


def managed_labels() -> Dict[str, str]:
    """Labels attached to every secret created for App Hosting."""
    return {FIREBASE_MANAGED: APPHOSTING_MANAGED_VALUE}


@dataclass(frozen=True)
class Backend:
    """A deployed backend that needs to read secrets."""
    project_number: str
    service_account: Optional[str] = None


@dataclass
class Binding:
    """A role granted to a set of principals."""
    role: str
    members: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {"role": self.role, "members": list(self.members)}


@dataclass
class Policy:
    """Ordered IAM bindings on a single secret."""
    bindings: List[Binding] = field(default_factory=list)


class SecretOwnership(Enum):
    """Which subsystem garbage collects a secret's versions."""
    UNMANAGED = "unmanaged"
    SELF_MANAGED = "self_managed"
    FOREIGN_MANAGED = "foreign_managed"

    @classmethod
    def from_labels(cls, labels: Dict[str, str]) -> "SecretOwnership":
        if FIREBASE_MANAGED not in labels:
            return cls.UNMANAGED
        if labels[FIREBASE_MANAGED] == APPHOSTING_MANAGED_VALUE:
            return cls.SELF_MANAGED
        return cls.FOREIGN_MANAGED


@dataclass
class Secret:
    """A Secret Manager secret's metadata (never its payload)."""
    project: str
    name: str
    labels: Dict[str, str] = field(default_factory=dict)
    # Empty means automatic replication
    replica_locations: List[str] = field(default_factory=list)

    @property
    def single_region(self) -> Optional[str]:
        """The replica location if the secret is pinned to exactly one region."""
        if len(self.replica_locations) == 1:
            return self.replica_locations[0]
        return None

    @property
    def ownership(self) -> SecretOwnership:
        return SecretOwnership.from_labels(self.labels)


class EnsureOutcome(Enum):
    """Result of making sure a secret exists and is fit for App Hosting."""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    ABORTED = "aborted"

    @property
    def usable(self) -> bool:
        """Whether callers may go on to use (and grant access to) the secret."""
        return self is not EnsureOutcome.ABORTED
