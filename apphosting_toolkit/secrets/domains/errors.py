"""Error types raised by secret workflows."""
from typing import List, Optional

from .models import Binding


class SecretsError(Exception):
    """Base error for secret operations. Keeps the underlying cause in ``original``."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class PolicyReadError(SecretsError):
    """Reading a secret's IAM policy failed."""
    pass


class PolicyWriteError(SecretsError):
    """Writing a secret's IAM policy failed."""

    def __init__(
        self,
        message: str,
        bindings: List[Binding],
        original: Optional[BaseException] = None,
    ):
        super().__init__(message, original)
        self.bindings = bindings


class UnexpectedSecretError(SecretsError):
    """Loading a secret failed for a reason other than it not existing."""
    pass
