from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class UnauthorizedError(DomainError):
    """Missing or invalid session."""


class NotFoundError(DomainError):
    """Requested resource does not exist or is not visible to the caller."""


class ValidationError(DomainError):
    """Malformed input, with per-field messages."""

    def __init__(self, message: str, *, errors: list[dict[str, str]] | None = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[{"field": field, "message": message}])


class InsufficientBalanceError(DomainError):
    def __init__(self, *, required: int, current: int):
        super().__init__("Insufficient balance")
        self.required = required
        self.current = current
        self.missing = required - current


class InvalidStateError(DomainError):
    """Operation not allowed in the current state (e.g. inactive tier)."""


class InvalidOAuthStateError(InvalidStateError):
    """OAuth callback state does not match the one issued at login."""


class UpstreamAuthError(DomainError):
    """Identity provider rejected the code or the profile request."""


class ServerCreationFailedError(DomainError):
    """Server row could not be created after the balance was debited."""


class ConfigurationError(DomainError):
    """Required setting is missing."""
