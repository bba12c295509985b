"""Exceptions raised by vigenere_crypto."""


class CipherError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(CipherError, ValueError):
    """Unusable alphabet or key, detected at construction time."""


class InvalidArgumentError(CipherError, ValueError):
    """Missing or out-of-range argument to a transform call."""


class EnumerationError(CipherError, OSError):
    """The source root of a tree mirror cannot be listed."""
