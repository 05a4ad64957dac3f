"""
Decryption result wire format.

Payload:      two 32-byte big-endian words, (yes, no), each fitting euint64.
Attestation:  concatenated 65-byte secp256k1 signatures over
              keccak256(domain || chain_id || contract || request_id
                        || keccak256(handles) || keccak256(payload))
"""

from typing import Sequence, Tuple

from ..constants import ATTESTATION_DOMAIN, EUINT64_MAX, PAYLOAD_WORD_SIZE
from ..crypto import address_to_bytes, keccak256

PAYLOAD_LENGTH = 2 * PAYLOAD_WORD_SIZE


def encode_payload(yes: int, no: int) -> bytes:
    for value in (yes, no):
        if value < 0 or value > EUINT64_MAX:
            raise ValueError(f"Tally {value} does not fit in euint64")
    return yes.to_bytes(PAYLOAD_WORD_SIZE, "big") + no.to_bytes(PAYLOAD_WORD_SIZE, "big")


def decode_payload(payload: bytes) -> Tuple[int, int]:
    """
    Raises:
        ValueError: wrong length or a word wider than 64 bits
    """
    payload = bytes(payload)
    if len(payload) != PAYLOAD_LENGTH:
        raise ValueError(f"Payload must be {PAYLOAD_LENGTH} bytes, got {len(payload)}")
    yes = int.from_bytes(payload[:PAYLOAD_WORD_SIZE], "big")
    no = int.from_bytes(payload[PAYLOAD_WORD_SIZE:], "big")
    if yes > EUINT64_MAX or no > EUINT64_MAX:
        raise ValueError("Payload word exceeds euint64 range")
    return yes, no


def handles_digest(handles: Sequence[str]) -> bytes:
    return keccak256(b"".join(bytes.fromhex(h[2:]) for h in handles))


def attestation_digest(
    chain_id: int,
    contract: str,
    request_id: int,
    handles: Sequence[str],
    payload: bytes,
) -> bytes:
    return keccak256(
        ATTESTATION_DOMAIN
        + chain_id.to_bytes(32, "big")
        + address_to_bytes(contract)
        + request_id.to_bytes(32, "big")
        + handles_digest(handles)
        + keccak256(bytes(payload))
    )
