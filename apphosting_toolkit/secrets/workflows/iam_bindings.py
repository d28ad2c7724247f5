"""Grant service accounts access to a secret."""
import json
import logging
import threading
import weakref
from typing import List, Tuple

from ..domains.errors import PolicyReadError, PolicyWriteError
from ..domains.interfaces import NotificationSink, PolicyStore
from ..domains.models import SECRET_ACCESSOR_ROLE, SECRET_VIEWER_ROLE, Binding, Policy
from ..domains.service_accounts import to_members

logger = logging.getLogger(__name__)

# One lock per (project, secret) so concurrent grants in this process cannot
# overwrite each other. Other processes can still race: the store is last-writer-wins.
# Entries disappear once no grant holds the lock.
_policy_locks: "weakref.WeakValueDictionary[Tuple[str, str], threading.Lock]" = weakref.WeakValueDictionary()
_policy_locks_guard = threading.Lock()


def _policy_lock(project_id: str, secret_name: str) -> threading.Lock:
    with _policy_locks_guard:
        lock = _policy_locks.get((project_id, secret_name))
        if lock is None:
            lock = threading.Lock()
            _policy_locks[(project_id, secret_name)] = lock
        return lock


def access_bindings(accounts: List[str]) -> List[Binding]:
    """Bindings a backend's service accounts need on a secret."""
    members = to_members(accounts)
    return [
        Binding(role=SECRET_ACCESSOR_ROLE, members=list(members)),
        # Cloud Build needs the viewer role to list secret versions and pin
        # the build to the latest one
        Binding(role=SECRET_VIEWER_ROLE, members=list(members)),
    ]


def grant_secret_access(
    project_id: str,
    secret_name: str,
    accounts: List[str],
    policy_store: PolicyStore,
    notifier: NotificationSink,
) -> None:
    """
    Append accessor and viewer bindings for ``accounts`` to a secret's IAM policy.

    Existing bindings are kept as-is and the new ones are appended after them,
    even when a binding for the same role already exists. Calling this twice
    therefore writes duplicate bindings; the store treats them as equivalent.

    Raises:
        PolicyReadError: If the current policy can't be read
        PolicyWriteError: If the updated policy can't be written
    """
    new_bindings = access_bindings(accounts)

    with _policy_lock(project_id, secret_name):
        try:
            existing = policy_store.get_iam_policy(project_id, secret_name)
        except Exception as e:
            raise PolicyReadError(
                f"Failed to get IAM bindings on secret: {secret_name} in project {project_id}. "
                "Ensure you have the permissions to do so and try again.",
                original=e,
            ) from e

        existing_bindings = list(existing.bindings) if existing and existing.bindings else []
        # TODO: Merge with existing bindings of the same role instead of appending
        updated = Policy(bindings=existing_bindings + new_bindings)
        logger.debug(
            f"Writing {len(updated.bindings)} bindings to {secret_name} "
            f"({len(existing_bindings)} existing)"
        )

        try:
            policy_store.set_iam_policy(project_id, secret_name, updated)
        except Exception as e:
            attempted = json.dumps([b.to_dict() for b in new_bindings])
            raise PolicyWriteError(
                f"Failed to set IAM bindings {attempted} on secret: {secret_name} in project "
                f"{project_id}. Ensure you have the permissions to do so and try again.",
                bindings=new_bindings,
                original=e,
            ) from e

    notifier.log_success(f"Successfully set IAM bindings on secret {secret_name}.")
