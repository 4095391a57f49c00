"""Danthes exceptions."""


class DanthesError(Exception):
    """Base class for danthes errors."""


class ConfigurationError(DanthesError):
    """Raised when a required setting is missing or invalid."""
