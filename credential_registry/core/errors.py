"""Engine error hierarchy.

Every error is a precondition violation that will recur until the caller
changes the request, so nothing here is retried.  ``kind`` is the stable
name the HTTP layer and the metrics use.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for all engine errors."""

    kind = "RegistryError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthorizedError(RegistryError):
    """Actor lacks the role or relationship the operation requires."""

    kind = "Unauthorized"


class RoleMismatchError(RegistryError):
    """Actor's role is not the issuer role of the domain."""

    kind = "RoleMismatch"


class AlreadyRegisteredError(RegistryError):
    """Principal already has a profile."""

    kind = "AlreadyRegistered"


class AlreadyRegisteredIssuerError(RegistryError):
    """Principal already registered as an issuer in this domain."""

    kind = "AlreadyRegisteredIssuer"


class NotRegisteredError(RegistryError):
    """Profile or issuer registration lookup miss."""

    kind = "NotRegistered"


class InvalidPayloadError(RegistryError):
    kind = "InvalidPayload"

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class InvalidStateError(RegistryError):
    """Workflow transition attempted from a state that does not permit it."""

    kind = "InvalidState"


class RecordNotFoundError(RegistryError):
    kind = "NotFound"
