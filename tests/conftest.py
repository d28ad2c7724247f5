"""Shared fixtures: in-memory stand-ins for the secret and policy stores."""
import copy
from pathlib import Path

import pytest
from google.api_core import exceptions

from apphosting_toolkit.secrets.domains import config_loader, gcp_client, preferences
from apphosting_toolkit.secrets.domains.interfaces import (
    ConfirmationPrompt,
    NotificationSink,
    PolicyStore,
    SecretStore,
)
from apphosting_toolkit.secrets.domains.models import Policy, Secret


class FakeSecretStore(SecretStore):
    def __init__(self, secrets=None, get_error=None):
        self.secrets = {s.name: s for s in (secrets or [])}
        self.get_error = get_error
        self.create_calls = []
        self.patch_calls = []

    def get_secret(self, project, name):
        if self.get_error is not None:
            raise self.get_error
        if name not in self.secrets:
            raise exceptions.NotFound(f"Secret [projects/{project}/secrets/{name}] not found.")
        return copy.deepcopy(self.secrets[name])

    def create_secret(self, project, name, labels, location=None):
        self.create_calls.append((project, name, dict(labels), location))
        self.secrets[name] = Secret(
            project=project,
            name=name,
            labels=dict(labels),
            replica_locations=[location] if location else [],
        )

    def patch_secret(self, project, name, labels):
        self.patch_calls.append((project, name, dict(labels)))
        self.secrets[name].labels = dict(labels)


class FakePolicyStore(PolicyStore):
    def __init__(self, policy=None, read_error=None, write_error=None):
        self.policy = policy if policy is not None else Policy()
        self.read_error = read_error
        self.write_error = write_error
        self.writes = []

    def get_iam_policy(self, project, name):
        if self.read_error is not None:
            raise self.read_error
        return copy.deepcopy(self.policy)

    def set_iam_policy(self, project, name, policy):
        self.writes.append((project, name, copy.deepcopy(policy)))
        if self.write_error is not None:
            raise self.write_error
        self.policy = copy.deepcopy(policy)


class FakePrompt(ConfirmationPrompt):
    def __init__(self, answer=False):
        self.answer = answer
        self.questions = []

    def confirm(self, message, default=False):
        self.questions.append((message, default))
        return self.answer


class RecordingNotifier(NotificationSink):
    def __init__(self):
        self.successes = []
        self.warnings = []
        self.errors = []

    def log_success(self, message):
        self.successes.append(message)

    def log_labeled_warning(self, label, message):
        self.warnings.append((label, message))

    def log_labeled_error(self, label, message):
        self.errors.append((label, message))


@pytest.fixture
def secret_store():
    return FakeSecretStore()


@pytest.fixture
def policy_store():
    return FakePolicyStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Point HOME, preferences and the lazily loaded config at a temp directory."""
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setattr(Path, "home", lambda: fake_home)

    fake_config_dir = fake_home / ".config" / "apphosting-toolkit"
    monkeypatch.setattr(preferences, "CONFIG_DIR", fake_config_dir)
    monkeypatch.setattr(preferences, "PREFERENCES_FILE", fake_config_dir / "preferences.json")
    monkeypatch.setattr(gcp_client, "_CONFIG", None)
    monkeypatch.setattr(gcp_client, "_CONFIG_LOADED", False)
    for name in ("GCP_PROJECT", "GCP_PROJECT_NUMBER", "GOOGLE_APPLICATION_CREDENTIALS"):
        # setenv first so teardown restores whatever the config loader exports
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    return fake_home


@pytest.fixture
def temp_config_dir(temp_home):
    config_dir = config_loader.default_config_path().parent
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir
