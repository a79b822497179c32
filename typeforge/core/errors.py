"""
typeforge error taxonomy
"""

from typing import Optional


class ConfigurationError(ValueError):
    """
    Invalid or contradictory export metadata.

    Fatal for the affected type only; the generator records it and carries on
    with unrelated types.
    """

    def __init__(self, message: str, type_name: Optional[str] = None):
        self.type_name = type_name
        if type_name:
            message = f"{type_name}: {message}"
        super().__init__(message)


class PreservationWarning(UserWarning):
    """Malformed custom-code markers in a previously generated file."""
