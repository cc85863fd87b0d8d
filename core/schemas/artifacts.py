"""
Schemas & Artifacts
File: artifacts.py

Purpose: Boundary models for the files written by the artifact writer.
Field aliases are the camelCase names the verifier's tooling reads;
all byte values are 0x-prefixed hex strings.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .versioning import FORMAT_VERSION


class _ArtifactModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)


class TreeNodeArtifact(_ArtifactModel):
    """One account in the tree result, merged with its leaf and proof."""

    lsk_address: str = Field(..., alias="lskAddress")
    address: str = Field(..., description="0x-hex 20-byte target address")
    balance: Decimal
    balance_units: int = Field(..., alias="balanceUnits", ge=0)
    threshold: int = Field(default=0, ge=0)
    mandatory_keys: list[str] = Field(default_factory=list, alias="mandatoryKeys")
    optional_keys: list[str] = Field(default_factory=list, alias="optionalKeys")
    payload: str
    hash: str
    proof: list[str] = Field(default_factory=list)


class SignaturePairArtifact(_ArtifactModel):
    public_key: str = Field(..., alias="publicKey")
    r: str
    s: str


class SignatureBundleArtifact(_ArtifactModel):
    leaf_hash: str = Field(..., alias="leafHash")
    commitment: str
    signatures: list[SignaturePairArtifact] = Field(default_factory=list)


class TreeResultArtifact(_ArtifactModel):
    """Full tree/signature output."""

    merkle_root: str = Field(..., alias="merkleRoot")
    nodes: list[TreeNodeArtifact] = Field(default_factory=list)
    signatures: list[SignatureBundleArtifact] | None = Field(default=None)


class SimpleNodeArtifact(_ArtifactModel):
    """
    Reduced node for the contract test harness.

    The harness decodes each node into a struct whose members follow the
    alphabetical order of these aliases, so names and order are fixed.
    """

    address: str = Field(..., alias="b32Address")
    balance_units: int = Field(..., alias="balanceBeddows", ge=0)
    threshold: int = Field(default=0, alias="numberOfSignatures", ge=0)
    mandatory_keys: list[str] = Field(default_factory=list, alias="mandatoryKeys")
    optional_keys: list[str] = Field(default_factory=list, alias="optionalKeys")
    proof: list[str] = Field(default_factory=list)


class SimpleTreeResultArtifact(_ArtifactModel):
    merkle_root: str = Field(..., alias="merkleRoot")
    nodes: list[SimpleNodeArtifact] = Field(default_factory=list)


class ManifestFileEntry(_ArtifactModel):
    path: str
    sha256: str
    size: int = Field(..., ge=0)


class ArtifactManifest(_ArtifactModel):
    """Index of one written artifact set."""

    format_version: str = Field(default=FORMAT_VERSION, alias="formatVersion")
    merkle_root: str = Field(..., alias="merkleRoot")
    leaf_count: int = Field(..., alias="leafCount", ge=0)
    signed: bool = False
    files: dict[str, ManifestFileEntry] = Field(default_factory=dict)


__all__ = [
    "TreeNodeArtifact",
    "SignaturePairArtifact",
    "SignatureBundleArtifact",
    "TreeResultArtifact",
    "SimpleNodeArtifact",
    "SimpleTreeResultArtifact",
    "ManifestFileEntry",
    "ArtifactManifest",
]
