"""CAIP-10 chain-qualified account identifiers.

``<namespace>:<chainId>:<address>``, e.g. ``eip155:1:0xf39F...2266``.
Verification only ever needs the trailing address segment.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from .constants import CAIP10_SEGMENTS, CAIP10_SEPARATOR, DEFAULT_CAIP_NAMESPACE
from .exceptions import MalformedIdentifier


@dataclass(frozen=True, slots=True, eq=False)
class ChainAddress:
    """Immutable CAIP-10 account identifier.

    Equality and hashing ignore the case of the address segment, so an
    EIP-55 checksummed address equals its lowercase form.
    """

    namespace: str
    chain_id: str
    address: str
    raw: str = field(default="", repr=False)

    @classmethod
    def parse(cls, identifier: "ChainAddress | str") -> "ChainAddress":
        if isinstance(identifier, ChainAddress):
            return identifier
        if not isinstance(identifier, str):
            raise MalformedIdentifier(identifier, reason="identifier must be a string")
        segments = identifier.split(CAIP10_SEPARATOR)
        if len(segments) != CAIP10_SEGMENTS:
            raise MalformedIdentifier(
                identifier,
                reason=f"expected {CAIP10_SEGMENTS} segments, got {len(segments)}",
            )
        if not all(segment.strip() for segment in segments):
            raise MalformedIdentifier(identifier, reason="empty segment")
        namespace, chain_id, address = segments
        return cls(namespace=namespace, chain_id=chain_id, address=address, raw=identifier)

    def __str__(self) -> str:
        return self.raw or CAIP10_SEPARATOR.join((self.namespace, self.chain_id, self.address))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = ChainAddress.parse(other)
            except MalformedIdentifier:
                return False
        if not isinstance(other, ChainAddress):
            return NotImplemented
        return (
            self.namespace == other.namespace
            and self.chain_id == other.chain_id
            and self.address.lower() == other.address.lower()
        )

    def __hash__(self) -> int:
        return hash((self.namespace, self.chain_id, self.address.lower()))


def caip10(chain_id: int | str, address: str, namespace: str = DEFAULT_CAIP_NAMESPACE) -> str:
    """Build a CAIP-10 identifier string."""
    return CAIP10_SEPARATOR.join((namespace, str(chain_id), address))


def address_from_caip10(identifier: "ChainAddress | str") -> str:
    """Return the address segment of a CAIP-10 identifier."""
    return ChainAddress.parse(identifier).address


__all__ = ["ChainAddress", "caip10", "address_from_caip10"]
