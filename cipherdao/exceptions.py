"""
CipherDAO Exceptions

Root exception classes shared across the package.
"""


class CipherDAOException(Exception):
    """Base exception for CipherDAO."""
    pass


class InvalidKeyError(CipherDAOException):
    """Invalid cryptographic key."""
    pass


class InvalidSignatureError(CipherDAOException):
    """Invalid or unrecoverable cryptographic signature."""
    pass


class ConfigurationError(CipherDAOException):
    """Configuration error."""
    pass
