"""Domain-Oriented Observability for registration infrastructure.

Probes for the store, the prefix policy client and the audit sinks.
"""

from registration.infrastructure.observability.audit_sink_probe import (
    AuditSinkProbe,
    DefaultAuditSinkProbe,
)
from registration.infrastructure.observability.prefix_policy_probe import (
    DefaultPrefixPolicyProbe,
    PrefixPolicyProbe,
)
from registration.infrastructure.observability.repository_probe import (
    DefaultRegistrationRepositoryProbe,
    RegistrationRepositoryProbe,
)

__all__ = [
    "AuditSinkProbe",
    "DefaultAuditSinkProbe",
    "PrefixPolicyProbe",
    "DefaultPrefixPolicyProbe",
    "RegistrationRepositoryProbe",
    "DefaultRegistrationRepositoryProbe",
]
