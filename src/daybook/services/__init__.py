"""Service layer for Daybook."""
