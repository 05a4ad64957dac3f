"""
CipherDAO Crypto Address Module

Ethereum-style account addresses with EIP-55 checksums. Every address that
enters the governance core is normalized here so that lookups keyed by
address are case-insensitive.
"""

from .hashing import keccak256

ADDRESS_PREFIX = "0x"
ADDRESS_LENGTH = 40  # 20 bytes = 40 hex chars
ZERO_ADDRESS = "0x" + "0" * ADDRESS_LENGTH


def public_key_to_address(public_key) -> str:
    """
    Derive address from a secp256k1 public key: last 20 bytes of keccak256.

    Args:
        public_key: PublicKey instance or 64/65-byte uncompressed key

    Returns:
        Checksum address with 0x prefix
    """
    if hasattr(public_key, 'to_bytes'):
        pub_bytes = public_key.to_bytes()
    else:
        pub_bytes = public_key

    if len(pub_bytes) == 65 and pub_bytes[0] == 0x04:
        pub_bytes = pub_bytes[1:]
    if len(pub_bytes) != 64:
        raise ValueError(f"secp256k1 public key must be 64 bytes, got {len(pub_bytes)}")

    return to_checksum_address(keccak256(pub_bytes)[-20:].hex())


def to_checksum_address(address: str) -> str:
    """
    Convert an address to EIP-55 checksum format.

    Raises:
        ValueError: if the address is not 20 bytes of hex
    """
    if address.startswith(ADDRESS_PREFIX):
        address = address[2:]
    address = address.lower()

    if len(address) != ADDRESS_LENGTH:
        raise ValueError(f"Address must be {ADDRESS_LENGTH} hex chars, got {len(address)}")
    try:
        int(address, 16)
    except ValueError:
        raise ValueError(f"Address contains non-hex characters: {address}")

    address_hash = keccak256(address.encode('utf-8')).hex()

    checksummed = ''
    for i, char in enumerate(address):
        if char in '0123456789':
            checksummed += char
        elif int(address_hash[i], 16) >= 8:
            checksummed += char.upper()
        else:
            checksummed += char.lower()

    return ADDRESS_PREFIX + checksummed


def is_valid_address(address) -> bool:
    """True if *address* is a well-formed, non-zero 20-byte hex address."""
    if not isinstance(address, str) or not address.startswith(ADDRESS_PREFIX):
        return False
    try:
        normalized = to_checksum_address(address)
    except ValueError:
        return False
    return normalized != to_checksum_address(ZERO_ADDRESS)


def address_to_bytes(address: str) -> bytes:
    """Raw 20 bytes of a hex address."""
    return bytes.fromhex(to_checksum_address(address)[2:])
