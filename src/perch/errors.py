"""Perch exception hierarchy.

Shared across the router, the pattern compiler, and the static delegate
so every module raises and catches the same types.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when router configuration is invalid.

    Malformed path templates, registration after the router has started
    dispatching, and unknown static options all fail fast with this error
    at setup time rather than at request time.
    """
