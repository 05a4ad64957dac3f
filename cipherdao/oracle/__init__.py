"""
CipherDAO decryption oracle boundary

  - DecryptionOracle                            (base.py)
  - payload / attestation encoding              (codec.py)
  - LocalDecryptionOracle                       (local.py)
"""

from .base import DecryptionOracle
from .codec import (
    PAYLOAD_LENGTH,
    attestation_digest,
    decode_payload,
    encode_payload,
    handles_digest,
)
from .local import DecryptionResponse, LocalDecryptionOracle, OracleError, PendingDecryption

__all__ = [
    "DecryptionOracle",
    "PAYLOAD_LENGTH",
    "attestation_digest",
    "decode_payload",
    "encode_payload",
    "handles_digest",
    "DecryptionResponse",
    "LocalDecryptionOracle",
    "OracleError",
    "PendingDecryption",
]
