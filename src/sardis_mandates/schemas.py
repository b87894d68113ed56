"""Wire-format payloads for mandates and the primitive registry."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic import ValidationError as PydanticValidationError

from .constants import SignatureAlgorithm
from .exceptions import ValidationError
from .models import PrimitiveCore, Signature


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class SignatureModel(_WireModel):
    alg: StrictStr
    mandate_hash: StrictStr = Field(alias="mandateHash")
    signature: StrictStr
    signer: Optional[StrictStr] = None
    chain_id: Optional[StrictInt] = Field(default=None, alias="chainId")
    domain: Optional[Dict[str, Any]] = None
    created_at: Optional[StrictStr] = Field(default=None, alias="createdAt")

    def to_signature(self) -> Signature:
        return Signature(
            alg=SignatureAlgorithm.parse(self.alg),
            mandate_hash=self.mandate_hash,
            signature=self.signature,
            signer=self.signer,
            chain_id=self.chain_id,
            domain=self.domain,
            created_at=self.created_at,
        )


class SignaturesModel(_WireModel):
    client_sig: Optional[SignatureModel] = Field(default=None, alias="clientSig")
    server_sig: Optional[SignatureModel] = Field(default=None, alias="serverSig")


class PrimitiveCoreModel(_WireModel):
    kind: StrictStr
    payload: Any = None

    def to_core(self) -> PrimitiveCore:
        return PrimitiveCore(kind=self.kind, payload=self.payload)


class MandateModel(_WireModel):
    """``MandateJSON``. Required-field checks are left to the Mandate constructor."""

    mandate_id: Optional[StrictStr] = Field(default=None, alias="mandateId")
    version: Optional[StrictStr] = None
    client: Optional[StrictStr] = None
    server: Optional[StrictStr] = None
    created_at: Optional[StrictStr] = Field(default=None, alias="createdAt")
    deadline: Optional[StrictStr] = None
    intent: Optional[StrictStr] = None
    core: Optional[PrimitiveCoreModel] = None
    signatures: Optional[SignaturesModel] = None


class PrimitiveEntry(_WireModel):
    kind: StrictStr
    schema_path: StrictStr = Field(alias="schemaPath")
    name: Optional[str] = None
    version: Optional[int] = None
    description: Optional[str] = None


class PrimitiveRegistry(_WireModel):
    spec_version: Optional[str] = Field(default=None, alias="specVersion")
    primitives: List[PrimitiveEntry] = Field(default_factory=list)

    def find(self, kind: str) -> Optional[PrimitiveEntry]:
        for entry in self.primitives:
            if entry.kind == kind:
                return entry
        return None


def parse_mandate_payload(data: Any) -> MandateModel:
    """Validate the shape of a ``MandateJSON`` object."""
    if isinstance(data, MandateModel):
        return data
    try:
        return MandateModel.model_validate(data)
    except PydanticValidationError as exc:
        raise _to_validation_error(exc) from exc


def parse_signature(data: Any, field_prefix: str = "signature") -> Signature:
    """Validate a wire signature object and convert it to a Signature."""
    if isinstance(data, Signature):
        return data
    try:
        model = SignatureModel.model_validate(data)
    except PydanticValidationError as exc:
        raise _to_validation_error(exc, prefix=field_prefix) from exc
    return model.to_signature()


def _to_validation_error(exc: PydanticValidationError, prefix: str = "") -> ValidationError:
    first = exc.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    field = ".".join(part for part in (prefix, loc) if part) or None
    return ValidationError(f"{field or 'mandate'}: {first.get('msg', 'invalid value')}", field=field)


__all__ = [
    "SignatureModel",
    "SignaturesModel",
    "PrimitiveCoreModel",
    "MandateModel",
    "PrimitiveEntry",
    "PrimitiveRegistry",
    "parse_mandate_payload",
    "parse_signature",
]
