"""Domain error taxonomy for identity, session and promotion operations."""

from uuid import UUID


class PortalError(Exception):
    """Base class for all errors raised by the portal core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(PortalError):
    """Bad credentials, provider timeout at sign-in, or no authenticated identity."""


class AuthorizationError(PortalError):
    """A role, verification or approval check failed.

    `reason` is the DenialReason value produced by the access gate.
    """

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.reason = reason


class ValidationError(PortalError):
    """Required fields missing, or a forbidden field change was requested.

    `inconsistent_application_id` is set when an approval stopped after the
    application was already moved to `provisioning`.
    """

    def __init__(self, message: str, inconsistent_application_id: UUID | None = None):
        super().__init__(message)
        self.inconsistent_application_id = inconsistent_application_id


class ProvisioningError(PortalError):
    """The credential provider rejected identity creation (duplicate email, timeout, ...).

    When raised from an application approval, `inconsistent_application_id`
    names the application that was left without a backing account.
    """

    def __init__(self, message: str, inconsistent_application_id: UUID | None = None):
        super().__init__(message)
        self.inconsistent_application_id = inconsistent_application_id


class NotFoundError(PortalError):
    """Profile or application absent."""


class ConflictError(PortalError):
    """The application is no longer pending, or is already under review."""


class NotificationError(PortalError):
    """Credential-reset delivery failed. Always recovered locally."""
