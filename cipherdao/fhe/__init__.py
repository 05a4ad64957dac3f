"""
CipherDAO FHE layer

  - FHEBackend / InputVerification / Handle     (backend.py)
  - MockCoprocessor / EncryptedInput            (mock.py)
"""

from .backend import FHEBackend, Handle, InputVerification
from .mock import EncryptedInput, MockCoprocessor, UnknownHandleError

__all__ = [
    "FHEBackend",
    "Handle",
    "InputVerification",
    "EncryptedInput",
    "MockCoprocessor",
    "UnknownHandleError",
]
