"""End-to-end tests for wiring a secret up to a backend."""
import pytest

from apphosting_toolkit.secrets.domains.models import Backend, EnsureOutcome, Secret
from apphosting_toolkit.secrets.workflows.backend_secrets import setup_backend_secret

from conftest import FakePrompt, FakeSecretStore


def _setup(backend, secret_store, policy_store, notifier, prompt=None, location=None, default_location=None):
    return setup_backend_secret(
        "proj-123",
        backend.project_number,
        backend,
        "API_KEY",
        secret_store=secret_store,
        policy_store=policy_store,
        prompt=prompt or FakePrompt(),
        notifier=notifier,
        location=location,
        default_location=default_location,
    )


class TestSetupBackendSecret:

    def test_new_secret_for_default_accounts(self, secret_store, policy_store, notifier):
        backend = Backend(project_number="123", service_account="")

        outcome = _setup(backend, secret_store, policy_store, notifier)

        assert outcome is EnsureOutcome.CREATED
        assert len(secret_store.create_calls) == 1
        assert len(policy_store.writes) == 1
        members = [
            "serviceAccount:123@cloudbuild.gserviceaccount.com",
            "serviceAccount:123-compute@developer.gserviceaccount.com",
        ]
        bindings = policy_store.writes[0][2].bindings
        assert [(b.role, b.members) for b in bindings] == [
            ("roles/secretmanager.secretAccessor", members),
            ("roles/secretmanager.viewer", members),
        ]

    def test_explicit_service_account_is_granted(self, secret_store, policy_store, notifier):
        backend = Backend(project_number="123", service_account="runner@proj-123.iam.gserviceaccount.com")

        _setup(backend, secret_store, policy_store, notifier)

        bindings = policy_store.writes[0][2].bindings
        assert all(b.members == ["serviceAccount:runner@proj-123.iam.gserviceaccount.com"] for b in bindings)

    def test_existing_secret_still_gets_access(self, policy_store, notifier):
        secret_store = FakeSecretStore([Secret(project="proj-123", name="API_KEY")])

        outcome = _setup(Backend(project_number="123"), secret_store, policy_store, notifier)

        assert outcome is EnsureOutcome.ALREADY_EXISTS
        assert secret_store.create_calls == []
        assert len(policy_store.writes) == 1

    def test_aborted_setup_grants_nothing(self, policy_store, notifier):
        secret_store = FakeSecretStore([
            Secret(project="proj-123", name="API_KEY", labels={"firebase-managed": "functions"})
        ])

        outcome = _setup(
            Backend(project_number="123"),
            secret_store,
            policy_store,
            notifier,
            prompt=FakePrompt(answer=False),
        )

        assert outcome is EnsureOutcome.ABORTED
        assert policy_store.writes == []
        assert notifier.successes == []

    def test_replication_conflict_grants_nothing(self, policy_store, notifier):
        secret_store = FakeSecretStore([
            Secret(project="proj-123", name="API_KEY", replica_locations=["us-east1"])
        ])

        outcome = _setup(Backend(project_number="123"), secret_store, policy_store, notifier, location="us-central1")

        assert outcome is EnsureOutcome.ABORTED
        assert policy_store.writes == []

    def test_default_location_does_not_block_existing_secret(self, policy_store, notifier):
        secret_store = FakeSecretStore([Secret(project="proj-123", name="API_KEY")])

        outcome = _setup(
            Backend(project_number="123"),
            secret_store,
            policy_store,
            notifier,
            default_location="us-central1",
        )

        assert outcome is EnsureOutcome.ALREADY_EXISTS
        assert len(policy_store.writes) == 1

    def test_stores_must_be_passed_by_keyword(self, secret_store, policy_store, notifier):
        backend = Backend(project_number="123")

        with pytest.raises(TypeError):
            setup_backend_secret(
                "proj-123", "123", backend, "API_KEY", secret_store, policy_store, FakePrompt(), notifier
            )

        assert secret_store.create_calls == []
