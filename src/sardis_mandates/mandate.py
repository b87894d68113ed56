"""Mandate documents: a signed agreement between a client and a server.

A Mandate is an immutable MandateRecord (every agreement field) plus a
separate, mutable map of at most two role signatures. Canonicalization and
hashing only ever see the record, so attaching a signature can never change
the hash that signature certifies.
"""
from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional

from eth_account.signers.local import LocalAccount

from .caip10 import ChainAddress
from .canonical import canonicalize, hash_hex
from .constants import MANDATE_VERSION, Role, SignatureAlgorithm
from .exceptions import MalformedIdentifier, ValidationError
from .models import MandateRecord, MandateVerification, PrimitiveCore, Signature, VerificationResult
from .primitives import PrimitiveRegistryLike
from .schemas import parse_mandate_payload, parse_signature
from .signing import MandateSigner, sign_mandate
from .utils import format_timestamp, new_mandate_id, parse_timestamp, utc_now_iso
from .verification import verify_all as _verify_all
from .verification import verify_role as _verify_role


class Mandate:
    """Signed agreement document between a client and a server.

    Example:
        mandate = Mandate(
            client=caip10(1, client_account.address),
            server=caip10(1, server_account.address),
            deadline="2025-10-23T10:20:00Z",
            intent="Swap 100 USDC for WBTC",
            core={"kind": "swap@1", "payload": {...}},
        )
        await mandate.sign_as_server(server_account)
        await mandate.sign_as_client(client_account)
        mandate.verify_all()
    """

    __slots__ = ("_record", "_signatures")

    def __init__(
        self,
        *,
        client: ChainAddress | str | None,
        server: ChainAddress | str | None,
        deadline: str | datetime | None,
        core: PrimitiveCore | Mapping[str, Any] | None,
        mandate_id: Optional[str] = None,
        version: Optional[str] = None,
        created_at: str | datetime | None = None,
        intent: Optional[str] = "",
        signatures: Optional[Mapping[Any, Any]] = None,
        registry: Optional[PrimitiveRegistryLike] = None,
    ):
        primitive = _coerce_core(core)
        if registry is not None:
            ok, reason = registry.validate(primitive)
            if not ok:
                raise ValidationError(
                    f"core rejected by primitive registry: {reason or 'invalid payload'}",
                    field="core",
                )

        self._record = MandateRecord(
            mandate_id=_coerce_mandate_id(mandate_id),
            version=_coerce_version(version),
            client=_coerce_address(client, "client"),
            server=_coerce_address(server, "server"),
            created_at=_coerce_timestamp(created_at, "createdAt", default=utc_now_iso),
            deadline=_coerce_timestamp(deadline, "deadline"),
            intent=_coerce_intent(intent),
            core=primitive,
        )
        self._signatures: dict[Role, Signature] = {}
        for key, value in (signatures or {}).items():
            if value is None:
                continue
            role = _role_from_slot(key)
            self._signatures[role] = parse_signature(value, field_prefix=f"signatures.{role.slot}")

    # ----- fields -------------------------------------------------------------

    @property
    def record(self) -> MandateRecord:
        return dataclasses.replace(self._record, core=self.core)

    @property
    def mandate_id(self) -> str:
        return self._record.mandate_id

    @property
    def version(self) -> str:
        return self._record.version

    @property
    def client(self) -> ChainAddress:
        return self._record.client

    @property
    def server(self) -> ChainAddress:
        return self._record.server

    @property
    def created_at(self) -> str:
        return self._record.created_at

    @property
    def deadline(self) -> str:
        return self._record.deadline

    @property
    def intent(self) -> str:
        return self._record.intent

    @property
    def core(self) -> PrimitiveCore:
        # Fresh copy; PrimitiveCore copies its payload on construction.
        return PrimitiveCore(kind=self._record.core.kind, payload=self._record.core.payload)

    @property
    def signatures(self) -> dict[Role, Signature]:
        return dict(self._signatures)

    def address_for(self, role: Role | str) -> ChainAddress:
        return self._record.address_for(Role.parse(role))

    def get_signature(self, role: Role | str) -> Optional[Signature]:
        return self._signatures.get(Role.parse(role))

    # ----- views --------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Wire-format snapshot (``MandateJSON``); an independent copy."""
        data = self._record.to_dict()
        if self._signatures:
            data["signatures"] = {
                role.slot: self._signatures[role].to_dict()
                for role in Role
                if role in self._signatures
            }
        return data

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def canonical_bytes(self) -> bytes:
        """Canonical form of everything except signatures."""
        return canonicalize(self._record.to_dict())

    def to_canonical_string(self) -> str:
        return self.canonical_bytes().decode("utf-8")

    def mandate_hash(self) -> str:
        """Keccak-256 of the canonical form, 0x-prefixed hex."""
        return hash_hex(self.canonical_bytes())

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Whether the deadline has passed. Never checked implicitly."""
        try:
            deadline = parse_timestamp(self._record.deadline)
        except ValueError as exc:
            raise ValidationError(
                f"deadline is not an ISO 8601 timestamp: {self._record.deadline!r}",
                field="deadline",
            ) from exc
        return deadline <= (now or datetime.now(timezone.utc))

    # ----- lifecycle ----------------------------------------------------------

    def attach_signature(self, role: Role | str, signature: Signature | Mapping[str, Any]) -> None:
        """Set a role's signature, replacing any earlier one."""
        role = Role.parse(role)
        self._signatures[role] = parse_signature(signature, field_prefix=f"signatures.{role.slot}")

    def remove_signature(self, role: Role | str) -> Optional[Signature]:
        return self._signatures.pop(Role.parse(role), None)

    def replace(self, **changes: Any) -> "Mandate":
        """Copy with some fields changed; existing signatures are carried over as-is."""
        fields: dict[str, Any] = {
            "mandate_id": self._record.mandate_id,
            "version": self._record.version,
            "client": self._record.client,
            "server": self._record.server,
            "created_at": self._record.created_at,
            "deadline": self._record.deadline,
            "intent": self._record.intent,
            "core": self._record.core,
            "signatures": dict(self._signatures),
        }
        fields.update(changes)
        return type(self)(**fields)

    # ----- signing ------------------------------------------------------------

    async def sign(
        self,
        role: Role | str,
        signer: MandateSigner | LocalAccount,
        alg: SignatureAlgorithm | str = SignatureAlgorithm.PERSONAL_MESSAGE,
        domain: Optional[Mapping[str, Any]] = None,
    ) -> Signature:
        """Sign as a role using EIP-191 (default) or EIP-712 (typed data)."""
        return await sign_mandate(self, role, signer, alg, domain)

    async def sign_as_client(
        self,
        signer: MandateSigner | LocalAccount,
        alg: SignatureAlgorithm | str = SignatureAlgorithm.PERSONAL_MESSAGE,
        domain: Optional[Mapping[str, Any]] = None,
    ) -> Signature:
        return await self.sign(Role.CLIENT, signer, alg, domain)

    async def sign_as_server(
        self,
        signer: MandateSigner | LocalAccount,
        alg: SignatureAlgorithm | str = SignatureAlgorithm.PERSONAL_MESSAGE,
        domain: Optional[Mapping[str, Any]] = None,
    ) -> Signature:
        return await self.sign(Role.SERVER, signer, alg, domain)

    # ----- verification -------------------------------------------------------

    def verify_role(
        self,
        role: Role | str,
        domain: Optional[Mapping[str, Any]] = None,
    ) -> VerificationResult:
        return _verify_role(self, role, domain)

    def verify_all(
        self,
        client_domain: Optional[Mapping[str, Any]] = None,
        server_domain: Optional[Mapping[str, Any]] = None,
    ) -> MandateVerification:
        return _verify_all(self, client_domain, server_domain)

    # ----- factories ----------------------------------------------------------

    @classmethod
    def from_object(cls, data: Mapping[str, Any]) -> "Mandate":
        """Build a mandate (with any attached signatures) from its wire form."""
        model = parse_mandate_payload(data)
        signatures: dict[Role, Signature] = {}
        if model.signatures is not None:
            if model.signatures.client_sig is not None:
                signatures[Role.CLIENT] = model.signatures.client_sig.to_signature()
            if model.signatures.server_sig is not None:
                signatures[Role.SERVER] = model.signatures.server_sig.to_signature()
        return cls(
            mandate_id=model.mandate_id,
            version=model.version,
            client=model.client,
            server=model.server,
            created_at=model.created_at,
            deadline=model.deadline,
            intent=model.intent if model.intent is not None else "",
            core=model.core.to_core() if model.core is not None else None,
            signatures=signatures,
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> "Mandate":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"mandate is not valid JSON: {exc.msg}") from exc
        return cls.from_object(data)

    def __repr__(self) -> str:
        signed = ",".join(role.value for role in Role if role in self._signatures) or "none"
        return (
            f"Mandate(mandate_id={self.mandate_id!r}, client={str(self.client)!r}, "
            f"server={str(self.server)!r}, signed_by={signed})"
        )


def _coerce_core(core: PrimitiveCore | Mapping[str, Any] | None) -> PrimitiveCore:
    if core is None:
        raise ValidationError("core is required", field="core")
    if isinstance(core, Mapping):
        kind = core.get("kind")
        payload = core.get("payload")
    elif isinstance(core, PrimitiveCore):
        kind, payload = core.kind, core.payload
    else:
        raise ValidationError(f"core must be a mapping, got {type(core).__name__}", field="core")

    if not isinstance(kind, str) or not kind.strip():
        raise ValidationError("core.kind is required", field="core.kind")
    if payload is None or (not isinstance(payload, (Mapping, list, tuple)) and not payload):
        raise ValidationError("core.payload is required", field="core.payload")
    return PrimitiveCore(kind=kind, payload=payload)


def _coerce_address(value: ChainAddress | str | None, field: str) -> ChainAddress:
    if value is None or value == "":
        raise ValidationError(f"{field} is required (CAIP-10)", field=field)
    try:
        return ChainAddress.parse(value)
    except MalformedIdentifier as exc:
        raise ValidationError(f"{field} is not a CAIP-10 identifier: {value!r}", field=field) from exc


def _coerce_mandate_id(value: Optional[str]) -> str:
    if value is None:
        return new_mandate_id()
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("mandateId must be a non-empty string", field="mandateId")
    return value


def _coerce_version(value: Optional[str]) -> str:
    if value is None:
        return MANDATE_VERSION
    if value != MANDATE_VERSION:
        raise ValidationError(f"version must be {MANDATE_VERSION}", field="version")
    return value


def _coerce_intent(value: Optional[str]) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("intent must be a string", field="intent")
    return value


def _coerce_timestamp(value: str | datetime | None, field: str, default=None) -> str:
    if value is None or value == "":
        if default is not None:
            return default()
        raise ValidationError(f"{field} (ISO 8601) is required", field=field)
    if isinstance(value, datetime):
        try:
            return format_timestamp(value)
        except ValueError as exc:
            raise ValidationError(f"{field} must be timezone-aware", field=field) from exc
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO 8601 string", field=field)
    return value


def _role_from_slot(key: Any) -> Role:
    if isinstance(key, Role):
        return key
    for role in Role:
        if key in (role.value, role.slot):
            return role
    raise ValidationError(f"unknown signature slot {key!r}", field=f"signatures.{key}")


__all__ = ["Mandate"]
