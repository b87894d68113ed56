"""EIP-712 typed-data support for mandate signatures.

The typed structure is deliberately tiny, ``Mandate(bytes32 mandateHash)``:
the mandate hash already commits to the whole document, and the domain binds
the signature to a chain (and optionally a contract), preventing replay across
chains or applications.

Reference: https://eips.ethereum.org/EIPS/eip-712
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from eth_account.messages import SignableMessage, encode_typed_data

from .constants import EIP712_DOMAIN_FIELDS, MANDATE_PRIMARY_TYPE, MANDATE_TYPED_DATA_TYPE
from .exceptions import ConfigurationError


def validate_domain(domain: Mapping[str, Any] | None) -> dict[str, Any]:
    """Check an EIP-712 domain carries a numeric chainId and only known fields.

    Raises:
        ConfigurationError: if the domain is absent or malformed.
    """
    if domain is None:
        raise ConfigurationError("EIP-712 requires a domain with chainId", field="domain")
    if not isinstance(domain, Mapping):
        raise ConfigurationError(
            f"EIP-712 domain must be a mapping, got {type(domain).__name__}",
            field="domain",
        )
    chain_id = domain.get("chainId")
    if isinstance(chain_id, bool) or not isinstance(chain_id, int):
        raise ConfigurationError("EIP-712 requires a domain with numeric chainId", field="domain.chainId")
    unknown = sorted(set(domain) - set(EIP712_DOMAIN_FIELDS))
    if unknown:
        raise ConfigurationError(
            f"EIP-712 domain has unsupported fields: {', '.join(unknown)}",
            field="domain",
        )
    return dict(domain)


def build_typed_data(domain: Mapping[str, Any] | None, mandate_hash: str) -> dict[str, Any]:
    """Build the full EIP-712 message for a mandate hash.

    Returns a dict with keys: types, primaryType, domain, message.
    """
    domain_data = validate_domain(domain)
    # EIP712Domain lists only the fields present, in EIP order.
    domain_type = [
        {"name": name, "type": type_}
        for name, type_ in EIP712_DOMAIN_FIELDS.items()
        if name in domain_data
    ]
    return {
        "types": {
            "EIP712Domain": domain_type,
            MANDATE_PRIMARY_TYPE: list(MANDATE_TYPED_DATA_TYPE),
        },
        "primaryType": MANDATE_PRIMARY_TYPE,
        "domain": domain_data,
        "message": {"mandateHash": _hash_to_bytes32(mandate_hash)},
    }


def encode_mandate_typed_data(domain: Mapping[str, Any] | None, mandate_hash: str) -> SignableMessage:
    """EIP-712 signable message for recovery."""
    return encode_typed_data(full_message=build_typed_data(domain, mandate_hash))


def _hash_to_bytes32(mandate_hash: str) -> bytes:
    raw = bytes.fromhex(mandate_hash.removeprefix("0x"))
    if len(raw) != 32:
        raise ValueError(f"mandate hash must be 32 bytes, got {len(raw)}")
    return raw


__all__ = [
    "validate_domain",
    "build_typed_data",
    "encode_mandate_typed_data",
]
