"""
CipherDAO Crypto Signing Module

Digest signing and signer recovery for input proofs and oracle attestations.
"""

from typing import List

from ..exceptions import InvalidSignatureError
from .keys import PrivateKey, PublicKey, Signature
from .address import to_checksum_address
from ..constants import SIGNATURE_LENGTH


def sign_digest(private_key: PrivateKey, digest: bytes) -> bytes:
    """
    Sign a 32-byte digest and return the 65-byte serialized signature.
    """
    return private_key.sign_msg_hash(digest).to_bytes()


def recover_signer(digest: bytes, signature: bytes) -> str:
    """
    Recover the checksum address that produced *signature* over *digest*.

    Raises:
        InvalidSignatureError: malformed or unrecoverable signature
    """
    sig = Signature.from_bytes(signature)
    public_key = PublicKey.recover_from_msg_hash(digest, sig)
    return public_key.to_address()


def split_signatures(blob: bytes) -> List[bytes]:
    """
    Split a concatenation of 65-byte signatures.

    Raises:
        InvalidSignatureError: empty blob or length not a multiple of 65
    """
    if not blob or len(blob) % SIGNATURE_LENGTH != 0:
        raise InvalidSignatureError(
            f"Signature bundle length {len(blob)} is not a positive multiple "
            f"of {SIGNATURE_LENGTH}"
        )
    return [
        blob[i:i + SIGNATURE_LENGTH]
        for i in range(0, len(blob), SIGNATURE_LENGTH)
    ]


def verify_signer(digest: bytes, signature: bytes, expected_address: str) -> bool:
    """True if *signature* over *digest* recovers to *expected_address*."""
    try:
        return recover_signer(digest, signature) == to_checksum_address(expected_address)
    except InvalidSignatureError:
        return False
