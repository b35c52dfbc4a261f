"""Ports for the registration context.

Protocols describing the store, the prefix policy collaborator and the
audit sink, plus the errors their implementations raise.
"""

from registration.ports.audit import IAuditSink
from registration.ports.prefix_policy import IPrefixPolicyClient
from registration.ports.repositories import IRegistrationRepository

__all__ = [
    "IAuditSink",
    "IPrefixPolicyClient",
    "IRegistrationRepository",
]
