"""
CipherDAO Crypto Keys Module

secp256k1 key management used by the decryption oracle signers and the
coprocessor's input-proof key. Wraps eth-keys for Web3 compatibility.
"""

import secrets
from typing import Tuple

from eth_keys.datatypes import PrivateKey as EthPrivateKey
from eth_keys.datatypes import PublicKey as EthPublicKey
from eth_keys.datatypes import Signature as EthSignature
from eth_utils import decode_hex

from ..exceptions import InvalidKeyError, InvalidSignatureError


class PrivateKey:
    """
    secp256k1 private key for digest signing.
    """

    def __init__(self, key_bytes: bytes):
        """
        Initialize from raw 32-byte private key.

        Raises:
            InvalidKeyError: If key bytes are invalid
        """
        if len(key_bytes) != 32:
            raise InvalidKeyError(f"Private key must be 32 bytes, got {len(key_bytes)}")

        try:
            self._key = EthPrivateKey(key_bytes)
        except Exception as e:
            raise InvalidKeyError(f"Invalid private key: {e}")

    @classmethod
    def from_hex(cls, hex_str: str) -> "PrivateKey":
        return cls(decode_hex(hex_str))

    @classmethod
    def from_int(cls, key_int: int) -> "PrivateKey":
        return cls(key_int.to_bytes(32, byteorder='big'))

    @classmethod
    def generate(cls) -> "PrivateKey":
        """Generate a new random private key."""
        return cls(secrets.token_bytes(32))

    @property
    def public_key(self) -> "PublicKey":
        return PublicKey(self._key.public_key)

    @property
    def address(self) -> str:
        """Checksum address of the corresponding public key."""
        return self.public_key.to_address()

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def sign_msg_hash(self, msg_hash: bytes) -> "Signature":
        """
        Sign a 32-byte message hash.

        Returns:
            Signature instance
        """
        if len(msg_hash) != 32:
            raise ValueError(f"Message hash must be 32 bytes, got {len(msg_hash)}")
        return Signature(self._key.sign_msg_hash(msg_hash))

    def __repr__(self) -> str:
        return f"PrivateKey({self.address})"


class PublicKey:
    """
    secp256k1 public key for verification.
    """

    def __init__(self, key):
        if isinstance(key, EthPublicKey):
            self._key = key
        elif isinstance(key, bytes) and len(key) == 64:
            self._key = EthPublicKey(key)
        elif isinstance(key, bytes) and len(key) == 65 and key[0] == 0x04:
            self._key = EthPublicKey(key[1:])
        else:
            raise InvalidKeyError(f"Invalid public key: {key!r}")

    @classmethod
    def recover_from_msg_hash(cls, msg_hash: bytes, signature: "Signature") -> "PublicKey":
        """Recover the signer's public key from a recoverable signature."""
        try:
            recovered = signature._signature.recover_public_key_from_msg_hash(msg_hash)
        except Exception as e:
            raise InvalidSignatureError(f"Signature recovery failed: {e}")
        return cls(recovered)

    def to_bytes(self) -> bytes:
        return self._key.to_bytes()

    def to_address(self) -> str:
        from .address import public_key_to_address
        return public_key_to_address(self)

    def verify_msg_hash(self, msg_hash: bytes, signature: "Signature") -> bool:
        try:
            return PublicKey.recover_from_msg_hash(msg_hash, signature) == self
        except InvalidSignatureError:
            return False

    def __eq__(self, other) -> bool:
        if not isinstance(other, PublicKey):
            return False
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key.to_bytes())

    def __repr__(self) -> str:
        return f"PublicKey({self.to_address()})"


class Signature:
    """
    ECDSA signature (v, r, s format), serialized as 65 bytes r || s || v.
    """

    def __init__(self, signature):
        self._signature = signature

    @classmethod
    def from_vrs(cls, v: int, r: int, s: int) -> "Signature":
        # Normalize v to 0/1
        if v >= 27:
            v -= 27
        try:
            return cls(EthSignature(vrs=(v, r, s)))
        except Exception as e:
            raise InvalidSignatureError(f"Invalid signature components: {e}")

    @classmethod
    def from_bytes(cls, sig_bytes: bytes) -> "Signature":
        """
        Create from 65-byte signature (r[32] + s[32] + v[1]).
        """
        if len(sig_bytes) != 65:
            raise InvalidSignatureError(f"Signature must be 65 bytes, got {len(sig_bytes)}")

        r = int.from_bytes(sig_bytes[0:32], byteorder='big')
        s = int.from_bytes(sig_bytes[32:64], byteorder='big')
        v = sig_bytes[64]
        return cls.from_vrs(v, r, s)

    @property
    def v(self) -> int:
        return self._signature.v

    @property
    def r(self) -> int:
        return self._signature.r

    @property
    def s(self) -> int:
        return self._signature.s

    def to_bytes(self) -> bytes:
        return (
            self.r.to_bytes(32, byteorder='big')
            + self.s.to_bytes(32, byteorder='big')
            + bytes([self.v])
        )

    def __repr__(self) -> str:
        return f"Signature(v={self.v}, r={hex(self.r)[:10]}..., s={hex(self.s)[:10]}...)"


def generate_keypair() -> Tuple[PrivateKey, PublicKey]:
    private_key = PrivateKey.generate()
    return private_key, private_key.public_key
