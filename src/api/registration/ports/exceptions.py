"""Port-level exceptions for the registration context.

These exceptions are raised by store and collaborator implementations and
by the application services that translate them. They share the
RegistrationError base with the domain exceptions.
"""

from registration.domain.exceptions import RegistrationError


class DuplicateGroupNameError(RegistrationError):
    """Raised when the group name is already reserved by another registration.

    Group names are globally unique for the lifetime of the system; the
    store enforces this with a unique index.
    """

    kind = "DuplicateName"


class RegistrationNotFoundError(RegistrationError):
    """Raised when no registration exists for the given id."""

    kind = "RegistrationNotFound"


class AppNotFoundError(RegistrationError):
    """Raised by the prefix policy client when an app has no configuration."""

    kind = "AppNotFound"


class UnknownApplicationError(RegistrationError):
    """Raised when the target application has no registered prefix policy."""

    kind = "UnknownApplication"


class DependencyUnavailableError(RegistrationError):
    """Raised when the store or the configuration service cannot be reached.

    This is the only retryable kind. The service itself never retries;
    callers decide on retry policy.
    """

    kind = "DependencyUnavailable"
    retryable = True
