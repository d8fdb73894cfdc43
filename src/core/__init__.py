"""Shared types, constants, config, errors, and logging."""
