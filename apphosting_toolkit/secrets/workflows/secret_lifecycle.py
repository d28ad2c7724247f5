"""Create or validate the secret behind an App Hosting backend."""
import logging
from http import HTTPStatus
from typing import Optional

from ..domains.errors import UnexpectedSecretError
from ..domains.interfaces import ConfirmationPrompt, NotificationSink, SecretStore
from ..domains.models import (
    FIREBASE_MANAGED,
    EnsureOutcome,
    Secret,
    SecretOwnership,
    managed_labels,
)

logger = logging.getLogger(__name__)

LOG_LABEL = "apphosting"


def _is_not_found(error: Exception) -> bool:
    # google.api_core exceptions expose the HTTP status as ``code``
    return getattr(error, "code", None) == HTTPStatus.NOT_FOUND


def _replication_matches(existing: Secret, location: str) -> bool:
    return existing.single_region == location


def upsert_secret(
    project: str,
    secret_name: str,
    secret_store: SecretStore,
    prompt: ConfirmationPrompt,
    notifier: NotificationSink,
    location: Optional[str] = None,
    default_location: Optional[str] = None,
) -> EnsureOutcome:
    """
    Ensure a secret exists for use with App Hosting, optionally locked to a region.

    ``location`` is a region the caller requires: a new secret is pinned to it
    and an existing secret must already be pinned to it. ``default_location``
    only applies when the secret is created.

    If the secret already exists, its replication can't be changed and it must
    not stay under Cloud Functions version management: functions delete old
    versions client-side while App Hosting relies on server-side cleanup.
    Taking a functions-managed secret over requires the user's confirmation.

    Returns:
        CREATED if the secret was created, ALREADY_EXISTS if an existing secret
        is fit for use, ABORTED if it must not be used.

    Raises:
        UnexpectedSecretError: If loading the secret fails for any reason
            other than it not existing, or if creating or relabeling it fails
    """
    try:
        existing = secret_store.get_secret(project, secret_name)
    except Exception as e:
        if not _is_not_found(e):
            raise UnexpectedSecretError(
                f"Unexpected error loading secret {secret_name} in project {project}. "
                "Ensure you have the permissions to do so and try again.",
                original=e,
            ) from e
        create_location = location or default_location
        try:
            secret_store.create_secret(project, secret_name, managed_labels(), create_location)
        except Exception as create_error:
            raise UnexpectedSecretError(
                f"Failed to create secret {secret_name} in project {project}. "
                "Ensure you have the permissions to do so and try again.",
                original=create_error,
            ) from create_error
        logger.info(f"Created secret {secret_name} in project {project}")
        return EnsureOutcome.CREATED

    if location and not _replication_matches(existing, location):
        notifier.log_labeled_error(
            LOG_LABEL,
            f"Secret {secret_name} in project {project} is not replicated only in {location}. "
            "Secret replication policies cannot be changed after creation",
        )
        return EnsureOutcome.ABORTED

    if existing.ownership is SecretOwnership.FOREIGN_MANAGED:
        notifier.log_labeled_warning(
            LOG_LABEL,
            f"Cloud Functions for Firebase currently manages versions of {secret_name}. "
            "Continuing will disable automatic deletion of old versions.",
        )
        if not prompt.confirm("Do you wish to continue?", default=False):
            return EnsureOutcome.ABORTED
        labels = {k: v for k, v in existing.labels.items() if k != FIREBASE_MANAGED}
        try:
            secret_store.patch_secret(project, secret_name, labels)
        except Exception as e:
            raise UnexpectedSecretError(
                f"Failed to update labels on secret {secret_name} in project {project}. "
                "Ensure you have the permissions to do so and try again.",
                original=e,
            ) from e
        logger.info(f"Removed {FIREBASE_MANAGED} label from secret {secret_name} in project {project}")

    return EnsureOutcome.ALREADY_EXISTS
