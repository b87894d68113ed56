"""
Protocol constants for mandate documents.

Single source of truth for the pinned protocol version, the two signing
roles, the supported signature algorithms and the EIP-712 type tables.

Usage:
    from sardis_mandates.constants import MANDATE_VERSION, Role, SignatureAlgorithm
"""
from __future__ import annotations

from enum import StrEnum
from typing import Final

from .exceptions import UnsupportedAlgorithm, ValidationError

# Changing this (or the digest function) changes the protocol.
MANDATE_VERSION: Final[str] = "0.1.0"

DEFAULT_SPECS_BASE_URL: Final[str] = (
    "https://raw.githubusercontent.com/quillai-network/mandate-specs/main/spec"
)
REGISTRY_INDEX_PATH: Final[str] = "primitives/registry.json"

CAIP10_SEPARATOR: Final[str] = ":"
CAIP10_SEGMENTS: Final[int] = 3
DEFAULT_CAIP_NAMESPACE: Final[str] = "eip155"

MANDATE_ID_PREFIX: Final[str] = "mdt_"


class Role(StrEnum):
    """Signing role; decides which chain address a recovered signer must match."""

    CLIENT = "client"
    SERVER = "server"

    @property
    def slot(self) -> str:
        """Key of this role's entry in the wire-format ``signatures`` object."""
        return f"{self.value}Sig"

    @classmethod
    def parse(cls, value: "Role | str") -> "Role":
        if isinstance(value, Role):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            raise ValidationError(
                f"role must be one of {', '.join(r.value for r in cls)}, got {value!r}",
                field="role",
            ) from exc


class SignatureAlgorithm(StrEnum):
    """Signature schemes a mandate can be signed under (wire values)."""

    PERSONAL_MESSAGE = "eip191"
    TYPED_DATA = "eip712"

    @classmethod
    def parse(cls, value: "SignatureAlgorithm | str") -> "SignatureAlgorithm":
        if isinstance(value, SignatureAlgorithm):
            return value
        normalized = _ALGORITHM_ALIASES.get(str(value).lower())
        if normalized is None:
            raise UnsupportedAlgorithm(str(value), supported=[a.value for a in cls])
        return normalized


_ALGORITHM_ALIASES: dict[str, SignatureAlgorithm] = {
    "eip191": SignatureAlgorithm.PERSONAL_MESSAGE,
    "personal-message": SignatureAlgorithm.PERSONAL_MESSAGE,
    "eip712": SignatureAlgorithm.TYPED_DATA,
    "typed-data": SignatureAlgorithm.TYPED_DATA,
}


# EIP-712 domain fields in the order mandated by the EIP.
EIP712_DOMAIN_FIELDS: Final[dict[str, str]] = {
    "name": "string",
    "version": "string",
    "chainId": "uint256",
    "verifyingContract": "address",
    "salt": "bytes32",
}

MANDATE_PRIMARY_TYPE: Final[str] = "Mandate"

MANDATE_TYPED_DATA_TYPE: Final[list[dict[str, str]]] = [
    {"name": "mandateHash", "type": "bytes32"},
]


__all__ = [
    "MANDATE_VERSION",
    "DEFAULT_SPECS_BASE_URL",
    "REGISTRY_INDEX_PATH",
    "CAIP10_SEPARATOR",
    "CAIP10_SEGMENTS",
    "DEFAULT_CAIP_NAMESPACE",
    "MANDATE_ID_PREFIX",
    "Role",
    "SignatureAlgorithm",
    "EIP712_DOMAIN_FIELDS",
    "MANDATE_PRIMARY_TYPE",
    "MANDATE_TYPED_DATA_TYPE",
]
