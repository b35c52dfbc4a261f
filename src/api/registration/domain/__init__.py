"""Domain layer for the registration context."""
