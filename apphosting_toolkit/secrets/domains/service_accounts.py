"""Service accounts that App Hosting backends run as."""
import re
from typing import List

from .models import SERVICE_ACCOUNT_PREFIX, Backend

_PROJECT_NUMBER_PATTERN = re.compile(r"[0-9]+")


def _check_project_number(project_number: str) -> None:
    if not isinstance(project_number, str) or not _PROJECT_NUMBER_PATTERN.fullmatch(project_number):
        raise ValueError(f"Invalid project number: {project_number!r}. Expected digits only.")


def cloud_build_service_account(project_number: str) -> str:
    """Default Cloud Build service account for a project."""
    _check_project_number(project_number)
    return f"{project_number}@cloudbuild.gserviceaccount.com"


def compute_service_account(project_number: str) -> str:
    """Default Compute Engine service account for a project."""
    _check_project_number(project_number)
    return f"{project_number}-compute@developer.gserviceaccount.com"


def service_accounts_for_backend(project_number: str, backend: Backend) -> List[str]:
    """
    Find the service accounts that need access to a backend's secrets.

    A backend with an explicit service account uses only that account. Legacy
    backends without one build on Cloud Build and run as the Compute Engine
    default account, so both defaults are returned in that order.
    """
    if backend.service_account:
        return [backend.service_account]
    return [
        cloud_build_service_account(project_number),
        compute_service_account(project_number),
    ]


def to_members(accounts: List[str]) -> List[str]:
    """Format service account emails as IAM principal references."""
    return [f"{SERVICE_ACCOUNT_PREFIX}{account}" for account in accounts]
