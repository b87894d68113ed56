"""Deterministic JSON canonicalization and the mandate digest.

Canonical form is the JSON Canonicalization Scheme (RFC 8785), produced by the
``jcs`` library: object keys sorted by UTF-16 code units, no insignificant
whitespace, ECMAScript string escaping and number formatting. The digest is
Keccak-256, the hash the EVM ecosystem signs over.

Values are checked before encoding so that anything without a canonical JSON
form fails with an EncodingError naming its JSON path.
"""
from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

import jcs
from eth_utils import keccak

from .exceptions import EncodingError

# Integers beyond this cannot round-trip through an IEEE-754 double.
MAX_SAFE_INTEGER = 2**53 - 1


def canonicalize(value: Any) -> bytes:
    """Return the RFC 8785 canonical UTF-8 bytes of a JSON-compatible value.

    Raises:
        EncodingError: if any nested value has no canonical JSON form.
    """
    normalized = _normalize(value, "$")
    try:
        return jcs.canonicalize(normalized)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"canonicalization failed: {exc}", path="$") from exc


def canonical_json(value: Any) -> str:
    return canonicalize(value).decode("utf-8")


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (32 bytes)."""
    return keccak(primitive=data)


def hash_hex(data: bytes) -> str:
    """Keccak-256 digest as 0x-prefixed lowercase hex."""
    return "0x" + keccak256(data).hex()


def _normalize(value: Any, path: str) -> Any:
    """Plain dict/list/scalar copy of value, rejecting what JCS cannot encode."""
    # bool is a subclass of int, check it first
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        _check_string(value, path)
        return value
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            raise EncodingError(
                f"integer {value} exceeds the IEEE-754 safe range; encode it as a string",
                path=path,
            )
        return int(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise EncodingError(f"{value!r} has no JSON representation", path=path)
        return value
    if isinstance(value, Mapping):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodingError(f"object key {key!r} is not a string", path=path)
            _check_string(key, path)
            result[key] = _normalize(item, f"{path}.{key}")
        return result
    if isinstance(value, (list, tuple)):
        return [_normalize(item, f"{path}[{index}]") for index, item in enumerate(value)]
    raise EncodingError(f"unsupported type {type(value).__name__}", path=path)


def _check_string(value: str, path: str) -> None:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError("string contains a lone surrogate", path=path) from exc


__all__ = [
    "MAX_SAFE_INTEGER",
    "canonicalize",
    "canonical_json",
    "keccak256",
    "hash_hex",
]
