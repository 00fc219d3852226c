"""Shared types, exceptions and logging."""
