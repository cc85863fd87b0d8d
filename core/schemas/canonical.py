"""
Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic JSON serialization for written artifacts, so that
two runs over the same ledger produce byte-identical files (and therefore
identical manifest digests).

CRITICAL: All outputs from this module MUST be deterministic across runs.
"""

import json
import math
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import ClaimTreeException

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


class CanonicalizationError(ClaimTreeException):
    """Raised when a value cannot be serialized canonically."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message=message, code="CANONICALIZATION_ERROR", details=details)


def _canonical_decimal(value: Decimal, path: str) -> int | Decimal:
    if not value.is_finite():
        raise CanonicalizationError(
            f"Non-finite decimal value encountered: {value}",
            details={"path": path},
        )
    if value == value.to_integral_value():
        return int(value)
    return value


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Recursively canonicalize a value for deterministic JSON serialization.

    Rules:
        - None values inside dicts are dropped
        - bytes become 0x-prefixed lowercase hex
        - Decimal becomes an int when integral, else stays an exact Decimal
        - Pydantic models are dumped by alias

    Raises:
        CanonicalizationError: For NaN/Infinity or unsupported types.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        # Must check bool before int since bool is subclass of int
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if not math.isfinite(value):
            raise CanonicalizationError(
                f"Non-finite float value encountered: {value}",
                details={"path": path},
            )
        return value

    if isinstance(value, Decimal):
        return _canonical_decimal(value, path)

    if isinstance(value, str):
        return value

    if isinstance(value, bytes):
        return "0x" + value.hex()

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, BaseModel):
        dumped = value.model_dump(by_alias=True, exclude_none=True)
        return canonicalize_value(dumped, path)

    if isinstance(value, dict):
        return {
            k: canonicalize_value(v, f"{path}.{k}" if path else k)
            for k, v in value.items()
            if v is not None
        }

    if isinstance(value, (list, tuple)):
        return [canonicalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]

    raise CanonicalizationError(
        f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def _encode(value: Any) -> str:
    if isinstance(value, dict):
        items = sorted((str(k), v) for k, v in value.items())
        sep_item, sep_key = CANONICAL_JSON_SEPARATORS
        return "{" + sep_item.join(
            json.dumps(k, ensure_ascii=False) + sep_key + _encode(v) for k, v in items
        ) + "}"
    if isinstance(value, list):
        return "[" + CANONICAL_JSON_SEPARATORS[0].join(_encode(v) for v in value) + "]"
    if isinstance(value, Decimal):
        # Written as a bare JSON number with every digit kept
        return format(value, "f").rstrip("0").rstrip(".")
    return json.dumps(value, ensure_ascii=False)


def dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Sorted keys, no whitespace, None fields excluded. Non-integral
    Decimals are written digit for digit, never through a binary float.

    Example:
        >>> dumps_canonical({"b": 2, "a": b"\\x01"})
        '{"a":"0x01","b":2}'
    """
    try:
        return _encode(canonicalize_value(obj))
    except CanonicalizationError:
        raise
    except (TypeError, ValueError) as e:
        raise CanonicalizationError(
            f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__},
        ) from e


def loads_exact(text: str | bytes) -> Any:
    """
    Parse JSON keeping non-integer numbers as Decimal.

    Balances must not pass through binary floats before being scaled
    to beddows.
    """
    return json.loads(text, parse_float=Decimal)
