"""Registration bounded context.

Registers directory groups for SCIM provisioning and tracks the external
sub-processes that complete each registration.
"""
