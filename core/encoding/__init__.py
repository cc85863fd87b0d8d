"""
Leaf payload encoding.

Usage:
    from core.encoding import encode_payload
    from core.crypto import hash_leaf

    leaf = hash_leaf(encode_payload(record))
"""
from .payload import (
    HEADER_WIDTH,
    DecodedPayload,
    decode_payload,
    encode_commitment_preimage,
    encode_payload,
)

__all__ = [
    "HEADER_WIDTH",
    "DecodedPayload",
    "decode_payload",
    "encode_commitment_preimage",
    "encode_payload",
]
