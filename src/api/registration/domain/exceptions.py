"""Domain exceptions for the registration bounded context.

All registration failures derive from RegistrationError so that callers can
tell the kinds apart while still catching them as one family.
"""


class RegistrationError(Exception):
    """Base class for registration failures.

    Attributes:
        kind: Stable name of the error kind, exposed to API clients
        retryable: Whether retrying the same input may succeed
    """

    kind = "RegistrationError"
    retryable = False


class RegistrationValidationError(RegistrationError):
    """Raised when a request is malformed (name, owner or target app)."""

    kind = "ValidationError"


class InvalidPrefixError(RegistrationError):
    """Raised when the group name matches none of the allowed prefixes."""

    kind = "InvalidPrefix"


class InvalidTransitionError(RegistrationError):
    """Raised when a sub-status report violates the transition order.

    Reports to an already terminal sub-process are rejected rather than
    ignored so that duplicate or out-of-order delivery is visible.
    """

    kind = "InvalidTransition"
