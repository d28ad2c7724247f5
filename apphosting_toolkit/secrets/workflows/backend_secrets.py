"""Wire a secret up to an App Hosting backend."""
import logging
from typing import Optional

from ..domains.interfaces import ConfirmationPrompt, NotificationSink, PolicyStore, SecretStore
from ..domains.models import Backend, EnsureOutcome
from ..domains.service_accounts import service_accounts_for_backend
from .iam_bindings import grant_secret_access
from .secret_lifecycle import upsert_secret

logger = logging.getLogger(__name__)


def setup_backend_secret(
    project_id: str,
    project_number: str,
    backend: Backend,
    secret_name: str,
    *,
    secret_store: SecretStore,
    policy_store: PolicyStore,
    prompt: ConfirmationPrompt,
    notifier: NotificationSink,
    location: Optional[str] = None,
    default_location: Optional[str] = None,
) -> EnsureOutcome:
    """
    Make ``secret_name`` usable by ``backend``.

    Resolves the backend's service accounts, creates or validates the secret,
    then grants the accounts access. Nothing is granted when the secret
    turns out to be unusable (ABORTED).

    ``location`` must match an existing secret; ``default_location`` is only
    used if the secret has to be created.
    """
    accounts = service_accounts_for_backend(project_number, backend)
    logger.debug(f"Service accounts for backend: {', '.join(accounts)}")

    outcome = upsert_secret(
        project_id,
        secret_name,
        secret_store=secret_store,
        prompt=prompt,
        notifier=notifier,
        location=location,
        default_location=default_location,
    )
    if not outcome.usable:
        logger.info(f"Not granting access to {secret_name}: setup was aborted")
        return outcome

    grant_secret_access(
        project_id,
        secret_name,
        accounts,
        policy_store=policy_store,
        notifier=notifier,
    )
    return outcome
