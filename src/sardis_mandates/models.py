"""Typed mandate value objects shared by signing, verification and the wire codec."""
from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional

from .caip10 import ChainAddress
from .constants import Role, SignatureAlgorithm


@dataclass(frozen=True, slots=True)
class PrimitiveCore:
    """Task-specific payload tagged with its primitive kind (e.g. ``swap@1``).

    The payload is copied on construction, so the core owns its data.
    """

    kind: str
    payload: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", copy.deepcopy(self.payload))

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "payload": copy.deepcopy(self.payload)}


@dataclass(frozen=True, slots=True)
class Signature:
    """A role's signature over a mandate hash."""

    alg: SignatureAlgorithm
    mandate_hash: str
    signature: str
    # Informational metadata, never part of the mandate hash.
    signer: Optional[str] = None
    chain_id: Optional[int] = None
    domain: Optional[Mapping[str, Any]] = None
    created_at: Optional[str] = None

    def __post_init__(self) -> None:
        if self.domain is not None:
            object.__setattr__(self, "domain", MappingProxyType(copy.deepcopy(dict(self.domain))))

    @property
    def signature_bytes(self) -> bytes:
        return bytes.fromhex(self.signature.removeprefix("0x"))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "alg": self.alg.value,
            "mandateHash": self.mandate_hash,
            "signature": self.signature,
        }
        if self.signer is not None:
            result["signer"] = self.signer
        if self.chain_id is not None:
            result["chainId"] = self.chain_id
        if self.domain is not None:
            result["domain"] = copy.deepcopy(dict(self.domain))
        if self.created_at is not None:
            result["createdAt"] = self.created_at
        return result


@dataclass(frozen=True, slots=True)
class MandateRecord:
    """Every mandate field except signatures; the only input to the mandate hash."""

    mandate_id: str
    version: str
    client: ChainAddress
    server: ChainAddress
    created_at: str
    deadline: str
    intent: str
    core: PrimitiveCore

    def address_for(self, role: Role) -> ChainAddress:
        return self.client if role is Role.CLIENT else self.server

    def to_dict(self) -> dict[str, Any]:
        return {
            "mandateId": self.mandate_id,
            "version": self.version,
            "client": str(self.client),
            "server": str(self.server),
            "createdAt": self.created_at,
            "deadline": self.deadline,
            "intent": self.intent,
            "core": self.core.to_dict(),
        }


@dataclass(slots=True)
class VerificationResult:
    ok: bool
    recovered_address: str
    recomputed_hash: str
    alg: SignatureAlgorithm

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "recovered": self.recovered_address,
            "recomputedHash": self.recomputed_hash,
            "alg": self.alg.value,
        }


@dataclass(slots=True)
class MandateVerification:
    """Both roles verified; only ever built when both succeed."""

    client: VerificationResult
    server: VerificationResult

    @property
    def ok(self) -> bool:
        return self.client.ok and self.server.ok

    def to_dict(self) -> dict[str, Any]:
        return {"client": self.client.to_dict(), "server": self.server.to_dict()}


__all__ = [
    "PrimitiveCore",
    "Signature",
    "MandateRecord",
    "VerificationResult",
    "MandateVerification",
]
