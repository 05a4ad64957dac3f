"""
Local Decryption Oracle

In-process relayer for simulation and tests. Requests are queued on
``request_decryption``; nothing happens until ``fulfill`` (or ``deliver``)
is called, which models an arbitrarily delayed, possibly absent, response.
"""

import itertools
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..constants import DEFAULT_CHAIN_ID
from ..crypto import PrivateKey, sign_digest, to_checksum_address
from ..fhe import MockCoprocessor
from ..logger import get_logger
from .base import DecryptionOracle
from .codec import attestation_digest, encode_payload

logger = get_logger(__name__)

# (request_id, payload, attestation) → None
Callback = Callable[[int, bytes, bytes], None]


@dataclass
class PendingDecryption:
    request_id: int
    handles: Tuple[str, ...]
    callback_id: str
    requester: str
    fulfilled: bool = False


@dataclass(frozen=True)
class DecryptionResponse:
    request_id: int
    payload: bytes
    attestation: bytes


class OracleError(Exception):
    """The oracle cannot serve a request."""


class LocalDecryptionOracle(DecryptionOracle):
    """
    Args:
        coprocessor: backend holding the cleartexts
        signer_keys: keys whose signatures form the attestation
        contract:    address of the governance contract attestations bind to
        chain_id:    chain id bound into every attestation
    """

    def __init__(
        self,
        coprocessor: MockCoprocessor,
        signer_keys: Sequence[PrivateKey],
        contract: str,
        chain_id: int = DEFAULT_CHAIN_ID,
    ):
        if not signer_keys:
            raise ValueError("LocalDecryptionOracle needs at least one signer key")
        self.coprocessor = coprocessor
        self.signer_keys = list(signer_keys)
        self.contract = to_checksum_address(contract)
        self.chain_id = chain_id
        self._ids = itertools.count(1)
        self._pending: Dict[int, PendingDecryption] = {}
        self._callbacks: Dict[str, Callback] = {}

    @property
    def signer_addresses(self) -> List[str]:
        return [k.address for k in self.signer_keys]

    def register_callback(self, callback_id: str, callback: Callback) -> None:
        self._callbacks[callback_id] = callback

    def request_decryption(
        self,
        handles: Sequence[str],
        callback_id: str,
        requester: str,
    ) -> int:
        request_id = next(self._ids)
        self._pending[request_id] = PendingDecryption(
            request_id=request_id,
            handles=tuple(handles),
            callback_id=callback_id,
            requester=to_checksum_address(requester),
        )
        logger.info(f"Oracle queued request #{request_id} ({len(handles)} handles) for {requester}")
        return request_id

    def pending(self) -> List[int]:
        return [rid for rid, p in self._pending.items() if not p.fulfilled]

    def get_request(self, request_id: int) -> Optional[PendingDecryption]:
        return self._pending.get(request_id)

    def attest(self, request_id: int, handles: Sequence[str], payload: bytes) -> bytes:
        digest = attestation_digest(self.chain_id, self.contract, request_id, handles, payload)
        return b"".join(sign_digest(key, digest) for key in self.signer_keys)

    def fulfill(self, request_id: int) -> DecryptionResponse:
        """
        Decrypt and attest a queued request.

        Only handles the requester is allowed to decrypt are served.
        """
        request = self._pending.get(request_id)
        if request is None:
            raise OracleError(f"Unknown request #{request_id}")
        for handle in request.handles:
            if not self.coprocessor.is_allowed(handle, request.requester):
                raise OracleError(
                    f"Request #{request_id}: {request.requester} may not decrypt {handle[:10]}…"
                )
        yes, no = (self.coprocessor.decrypt(h) for h in request.handles)
        payload = encode_payload(yes, no)
        request.fulfilled = True
        return DecryptionResponse(
            request_id=request_id,
            payload=payload,
            attestation=self.attest(request_id, request.handles, payload),
        )

    def deliver(self, request_id: int) -> DecryptionResponse:
        """Fulfill *request_id* and invoke the registered callback with the result."""
        response = self.fulfill(request_id)
        request = self._pending[request_id]
        try:
            callback = self._callbacks[request.callback_id]
        except KeyError:
            raise OracleError(f"No callback registered for {request.callback_id!r}")
        callback(response.request_id, response.payload, response.attestation)
        return response
