"""
Homomorphic Encryption Backend Interface

The governance core never decrypts anything. It manipulates opaque 32-byte
ciphertext handles through the operations below, which a coprocessor
evaluates on its behalf. Scalar operands are plaintext integers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

# 0x-prefixed hex of a 32-byte handle
Handle = str


@dataclass(frozen=True)
class InputVerification:
    """
    Outcome of importing a client-encrypted input.

    Either ``ok`` with the usable ``handle``, or not ``ok`` with a ``reason``.
    """
    ok: bool
    handle: Optional[Handle] = None
    reason: str = ""

    @classmethod
    def success(cls, handle: Handle) -> "InputVerification":
        return cls(ok=True, handle=handle)

    @classmethod
    def failure(cls, reason: str) -> "InputVerification":
        return cls(ok=False, reason=reason)


class FHEBackend(ABC):
    """Operations the governance core needs from an FHE coprocessor."""

    @abstractmethod
    def verify_input(
        self,
        handle: Handle,
        proof: bytes,
        contract: str,
        user: str,
    ) -> InputVerification:
        """Check *proof* binds *handle* to (*contract*, *user*) and import it."""

    @abstractmethod
    def as_encrypted(self, value: int) -> Handle:
        """Trivially encrypt a plaintext value."""

    @abstractmethod
    def eq(self, a: Handle, scalar: int) -> Handle:
        """Encrypted boolean ``a == scalar``."""

    @abstractmethod
    def select(self, condition: Handle, if_true: Handle, if_false: Handle) -> Handle:
        """Encrypted ``if_true if condition else if_false`` without branching."""

    @abstractmethod
    def add(self, a: Handle, b: Handle) -> Handle:
        """Encrypted ``a + b`` (wrapping)."""

    @abstractmethod
    def min(self, a: Handle, scalar: int) -> Handle:
        """Encrypted ``min(a, scalar)``."""

    @abstractmethod
    def allow(self, handle: Handle, account: str) -> None:
        """Grant *account* persistent permission to use and decrypt *handle*."""

    @abstractmethod
    def is_allowed(self, handle: Handle, account: str) -> bool:
        """Whether *account* holds permission on *handle*."""
