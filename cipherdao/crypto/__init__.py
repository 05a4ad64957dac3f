"""
CipherDAO Crypto Module

Cryptographic primitives used at the protocol boundary:
- secp256k1 keys and recoverable signatures (oracle attestations, input proofs)
- keccak256 hashing
- EIP-55 address handling
"""

from .keys import PrivateKey, PublicKey, Signature, generate_keypair
from .signing import sign_digest, recover_signer, split_signatures, verify_signer
from .hashing import keccak256, keccak256_hex
from .address import (
    ZERO_ADDRESS,
    address_to_bytes,
    is_valid_address,
    public_key_to_address,
    to_checksum_address,
)

__all__ = [
    # Keys
    "PrivateKey",
    "PublicKey",
    "Signature",
    "generate_keypair",
    # Signing
    "sign_digest",
    "recover_signer",
    "split_signatures",
    "verify_signer",
    # Hashing
    "keccak256",
    "keccak256_hex",
    # Address
    "ZERO_ADDRESS",
    "address_to_bytes",
    "is_valid_address",
    "public_key_to_address",
    "to_checksum_address",
]
