"""Infrastructure adapters for the registration context."""
