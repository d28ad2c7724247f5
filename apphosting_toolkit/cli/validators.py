"""Input validation for CLI arguments."""
import re
import sys

# Secret Manager secret IDs: letters, digits, underscores and hyphens, at most 255 chars
_SECRET_NAME_PATTERN = re.compile(r'^[a-zA-Z0-9_-]{1,255}$')
_PROJECT_NUMBER_PATTERN = re.compile(r'^[0-9]+$')
_SERVICE_ACCOUNT_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.gserviceaccount\.com$')


def _usage_error(*lines: str) -> None:
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(2)


def validate_secret_name(name: str) -> None:
    """
    Validate secret name matches Secret Manager requirements.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not name:
        _usage_error(
            "Error: Secret name cannot be empty",
            "\nSecret names must match: [a-zA-Z0-9_-]",
        )

    if not _SECRET_NAME_PATTERN.match(name):
        _usage_error(
            f"Error: Invalid secret name '{name}'",
            "\nAllowed characters: letters, numbers, underscores (_), hyphens (-)",
            "Not allowed: dots (.), spaces, special characters (@, $, !, etc.)",
            "\nExamples of valid names:",
            "  ✓ API_KEY",
            "  ✓ stripe-secret-prod",
            "\nExamples of invalid names:",
            "  ✗ api.key (contains dot)",
            "  ✗ API KEY (contains space)",
        )


def validate_project_number(project_number: str) -> None:
    """
    Validate a GCP project number (digits only, not the project ID).

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not project_number or not _PROJECT_NUMBER_PATTERN.match(project_number):
        _usage_error(
            f"Error: Invalid project number '{project_number}'",
            "\nProject numbers contain only digits, e.g. 123456789012.",
            "Find yours with: gcloud projects describe <project-id> --format='value(projectNumber)'",
        )


def validate_service_account(email: str) -> None:
    """
    Validate a service account email.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not _SERVICE_ACCOUNT_PATTERN.match(email or ""):
        _usage_error(
            f"Error: Invalid service account '{email}'",
            "\nExpected an email ending in .gserviceaccount.com, e.g.",
            "  my-backend@my-project.iam.gserviceaccount.com",
        )
