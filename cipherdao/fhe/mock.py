"""
Mock FHE Coprocessor

In-process stand-in for a real FHE coprocessor, for local simulation and
tests. Cleartexts live in a private table keyed by opaque handles; the core
only ever sees the handles. Client inputs are bound to (contract, user) by a
secp256k1 signature from the coprocessor key, as a real input verifier would
do with its ZK proof.

Every evaluated operation is appended to ``trace`` by name only, so callers
can assert that two code paths issue identical operation sequences.
"""

import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from ..constants import EUINT64_MAX, HANDLE_DOMAIN, INPUT_PROOF_DOMAIN
from ..crypto import (
    PrivateKey,
    address_to_bytes,
    keccak256,
    keccak256_hex,
    sign_digest,
    to_checksum_address,
    verify_signer,
)
from ..logger import get_logger
from .backend import FHEBackend, Handle, InputVerification

logger = get_logger(__name__)

EUINT64 = "euint64"
EBOOL = "ebool"


class UnknownHandleError(KeyError):
    """Handle was never produced by this coprocessor."""


@dataclass(frozen=True)
class EncryptedInput:
    """Client-side encryption result: handle plus its input proof."""
    handle: Handle
    proof: bytes


def input_proof_digest(handle: Handle, contract: str, user: str) -> bytes:
    return keccak256(
        INPUT_PROOF_DOMAIN
        + bytes.fromhex(handle[2:])
        + address_to_bytes(contract)
        + address_to_bytes(user)
    )


class MockCoprocessor(FHEBackend):
    """
    Cleartext-backed FHE backend.

    Args:
        signer_key: key that signs input proofs (generated if omitted)
    """

    def __init__(self, signer_key: Optional[PrivateKey] = None):
        self._signer = signer_key or PrivateKey.generate()
        self._values: Dict[Handle, Tuple[str, int]] = {}
        self._acl: Dict[Handle, Set[str]] = {}
        self._counter = itertools.count(1)
        self.trace: List[str] = []

    @property
    def signer_address(self) -> str:
        return self._signer.address

    # ── Handle table ──────────────────────────────────────────────────

    def _new_handle(self, kind: str, value: int) -> Handle:
        n = next(self._counter)
        handle = keccak256_hex(
            HANDLE_DOMAIN + n.to_bytes(32, "big") + kind.encode()
        )
        if kind == EBOOL:
            value = 1 if value else 0
        else:
            value &= EUINT64_MAX
        self._values[handle] = (kind, value)
        return handle

    def _read(self, handle: Handle, kind: Optional[str] = None) -> int:
        try:
            stored_kind, value = self._values[handle]
        except KeyError:
            raise UnknownHandleError(handle)
        if kind is not None and stored_kind != kind:
            raise TypeError(f"Handle {handle[:10]}… is {stored_kind}, expected {kind}")
        return value

    def decrypt(self, handle: Handle) -> int:
        """Cleartext of *handle*. Only the decryption oracle calls this."""
        return self._read(handle)

    def clear_trace(self) -> None:
        self.trace.clear()

    # ── Client side ───────────────────────────────────────────────────

    def encrypt_input(self, value: int, contract: str, user: str) -> EncryptedInput:
        """
        Encrypt *value* for use by *user* in a call to *contract*.
        """
        if value < 0 or value > EUINT64_MAX:
            raise ValueError(f"Input {value} does not fit in euint64")
        handle = self._new_handle(EUINT64, value)
        proof = sign_digest(self._signer, input_proof_digest(handle, contract, user))
        return EncryptedInput(handle=handle, proof=proof)

    # ── FHEBackend ────────────────────────────────────────────────────

    def verify_input(
        self,
        handle: Handle,
        proof: bytes,
        contract: str,
        user: str,
    ) -> InputVerification:
        if handle not in self._values:
            return InputVerification.failure("unknown input handle")
        try:
            digest = input_proof_digest(handle, contract, user)
        except ValueError as e:
            return InputVerification.failure(f"malformed input binding: {e}")
        if not verify_signer(digest, bytes(proof), self.signer_address):
            logger.debug(f"Input proof for {handle[:10]}… rejected (user={user})")
            return InputVerification.failure("input proof does not match handle, contract and user")
        self.trace.append("verify_input")
        self.allow(handle, contract)
        return InputVerification.success(handle)

    def as_encrypted(self, value: int) -> Handle:
        self.trace.append("as_encrypted")
        return self._new_handle(EUINT64, value)

    def eq(self, a: Handle, scalar: int) -> Handle:
        self.trace.append("eq")
        return self._new_handle(EBOOL, self._read(a) == scalar)

    def select(self, condition: Handle, if_true: Handle, if_false: Handle) -> Handle:
        self.trace.append("select")
        chosen = self._read(if_true) if self._read(condition, EBOOL) else self._read(if_false)
        return self._new_handle(EUINT64, chosen)

    def add(self, a: Handle, b: Handle) -> Handle:
        self.trace.append("add")
        return self._new_handle(EUINT64, self._read(a, EUINT64) + self._read(b, EUINT64))

    def min(self, a: Handle, scalar: int) -> Handle:
        self.trace.append("min")
        return self._new_handle(EUINT64, min(self._read(a, EUINT64), scalar))

    def allow(self, handle: Handle, account: str) -> None:
        self._read(handle)
        self.trace.append("allow")
        self._acl.setdefault(handle, set()).add(to_checksum_address(account))

    def is_allowed(self, handle: Handle, account: str) -> bool:
        try:
            return to_checksum_address(account) in self._acl.get(handle, set())
        except ValueError:
            return False

    def __repr__(self) -> str:
        return f"<MockCoprocessor handles={len(self._values)} signer={self.signer_address}>"
