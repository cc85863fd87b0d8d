"""
Schemas & Commitments
File: commitments.py

Purpose: In-process models passed between the hashing, tree and signing
stages. The leaf hash is the correlation key between stages.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .ledger import AccountRecord


class LeafNode(BaseModel):
    """An account record together with its encoded payload and leaf hash."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    hash: bytes = Field(..., min_length=32, max_length=32)
    payload: bytes
    record: AccountRecord


class SignaturePair(BaseModel):
    """One signer's detached signature over a commitment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    public_key: bytes = Field(..., min_length=32, max_length=32)
    r: bytes = Field(..., min_length=32, max_length=32)
    s: bytes = Field(..., min_length=32, max_length=32)


class AuthorizationBundle(BaseModel):
    """
    Redemption commitment for one leaf plus every available signature.

    Signatures follow declaration order: mandatory keys, then optional keys.
    Threshold is not checked here.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    leaf_hash: bytes = Field(..., min_length=32, max_length=32)
    commitment: bytes
    signatures: tuple[SignaturePair, ...] = ()


__all__ = [
    "LeafNode",
    "SignaturePair",
    "AuthorizationBundle",
]
