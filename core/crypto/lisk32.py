"""
Lisk32 Address Codec

Lisk addresses are the first 20 bytes of sha256(public_key), rendered as
"lsk" + 32 base32 characters of address data + 6 characters of a
BCH checksum over the 5-bit groups. The EVM side uses the raw 20 bytes.
"""
from __future__ import annotations

from core.crypto.hashing import sha256
from core.schemas.errors import InvalidAddressError


LISK32_PREFIX = "lsk"
LISK32_CHARSET = "zxvcpmbn3465o978uyrtkqew2adsjhfg"
LISK32_ADDRESS_LENGTH = 41
ADDRESS_LENGTH = 20

_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_CHECKSUM_LENGTH = 6


def _polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATOR[i]
    return chk


def _create_checksum(uint5: list[int]) -> list[int]:
    mod = _polymod(uint5 + [0] * _CHECKSUM_LENGTH) ^ 1
    return [(mod >> (5 * (5 - p))) & 31 for p in range(_CHECKSUM_LENGTH)]


def _convert_bits(data: list[int], from_bits: int, to_bits: int) -> list[int]:
    # No padding: 160 bits split evenly into both 8- and 5-bit groups.
    max_value = (1 << to_bits) - 1
    accumulator = 0
    bits = 0
    result: list[int] = []
    for value in data:
        accumulator = ((accumulator << from_bits) | value) & 0xFFFFFFFF
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            result.append((accumulator >> bits) & max_value)
    return result


def address_from_public_key(public_key: bytes) -> bytes:
    """Derive the 20-byte address of an Ed25519 public key."""
    if len(public_key) != 32:
        raise InvalidAddressError(
            f"Public key must be 32 bytes, got {len(public_key)}"
        )
    return sha256(public_key)[:ADDRESS_LENGTH]


def encode_lisk32(address: bytes, prefix: str = LISK32_PREFIX) -> str:
    """Render a 20-byte address in Lisk32 form."""
    if len(address) != ADDRESS_LENGTH:
        raise InvalidAddressError(
            f"Address must be {ADDRESS_LENGTH} bytes, got {len(address)}"
        )
    uint5 = _convert_bits(list(address), 8, 5)
    chars = uint5 + _create_checksum(uint5)
    return prefix + "".join(LISK32_CHARSET[c] for c in chars)


def validate_lisk32(address: str, prefix: str = LISK32_PREFIX) -> None:
    """
    Validate a Lisk32 address string.

    Raises:
        InvalidAddressError: On wrong length, prefix, alphabet or checksum.
    """
    if len(address) != LISK32_ADDRESS_LENGTH:
        raise InvalidAddressError(
            f"Lisk32 address must be {LISK32_ADDRESS_LENGTH} characters, got {len(address)}",
            address=address,
        )
    if not address.startswith(prefix):
        raise InvalidAddressError(
            f"Lisk32 address must start with '{prefix}'", address=address
        )
    body = address[len(prefix):]
    invalid = sorted({c for c in body if c not in LISK32_CHARSET})
    if invalid:
        raise InvalidAddressError(
            f"Lisk32 address contains invalid characters: {''.join(invalid)}",
            address=address,
        )
    if _polymod([LISK32_CHARSET.index(c) for c in body]) != 1:
        raise InvalidAddressError("Lisk32 address checksum mismatch", address=address)


def decode_lisk32(address: str, prefix: str = LISK32_PREFIX) -> bytes:
    """Decode a Lisk32 address into its 20 raw bytes."""
    validate_lisk32(address, prefix)
    data = address[len(prefix):-_CHECKSUM_LENGTH]
    return bytes(_convert_bits([LISK32_CHARSET.index(c) for c in data], 5, 8))


def lisk32_from_public_key(public_key: bytes, prefix: str = LISK32_PREFIX) -> str:
    return encode_lisk32(address_from_public_key(public_key), prefix)


__all__ = [
    "LISK32_PREFIX",
    "LISK32_CHARSET",
    "ADDRESS_LENGTH",
    "address_from_public_key",
    "encode_lisk32",
    "validate_lisk32",
    "decode_lisk32",
    "lisk32_from_public_key",
]
