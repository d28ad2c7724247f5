"""Secret lifecycle and access control for App Hosting backends."""
from .domains.models import Backend, Binding, EnsureOutcome, Policy, Secret, SecretOwnership
from .domains.errors import PolicyReadError, PolicyWriteError, SecretsError, UnexpectedSecretError
from .domains.service_accounts import service_accounts_for_backend
from .workflows.iam_bindings import grant_secret_access
from .workflows.secret_lifecycle import upsert_secret
from .workflows.backend_secrets import setup_backend_secret

__all__ = [
    "Backend",
    "Binding",
    "EnsureOutcome",
    "Policy",
    "Secret",
    "SecretOwnership",
    "PolicyReadError",
    "PolicyWriteError",
    "SecretsError",
    "UnexpectedSecretError",
    "service_accounts_for_backend",
    "grant_secret_access",
    "upsert_secret",
    "setup_backend_secret",
]
