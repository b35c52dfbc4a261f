"""Application layer for the registration context."""
