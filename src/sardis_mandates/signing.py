"""
Role-scoped mandate signing.

Signing always starts from the mandate's current canonical form, so a
signature certifies the document exactly as it stands when the signer is
invoked. Two schemes are supported:

- ``eip191`` (personal message): the canonical bytes are signed directly
  under the ``\\x19Ethereum Signed Message:\\n<len>`` prefix.
- ``eip712`` (typed data): ``Mandate(bytes32 mandateHash)`` is signed under a
  caller-supplied domain carrying at least a numeric ``chainId``.

Key custody is the signer's business: anything implementing MandateSigner
(a remote signer, an HSM bridge, a wallet) can be used, and a plain
eth_account LocalAccount is adapted automatically.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

from eth_account.messages import encode_defunct, encode_typed_data
from eth_account.signers.local import LocalAccount

from .canonical import hash_hex
from .constants import Role, SignatureAlgorithm
from .logging_config import LogContext
from .models import Signature
from .typed_data import build_typed_data, validate_domain

if TYPE_CHECKING:
    from .mandate import Mandate

logger = logging.getLogger(__name__)


@runtime_checkable
class MandateSigner(Protocol):
    """Key holder able to produce EVM signatures.

    Implementations may suspend (remote signer, hardware key); nothing else
    in the pipeline does.
    """

    @property
    def address(self) -> str:
        ...

    async def sign_message(self, message: bytes) -> bytes:
        """EIP-191 personal-message signature over raw bytes."""
        ...

    async def sign_typed_data(self, typed_data: dict[str, Any]) -> bytes:
        """EIP-712 signature over a full typed-data message."""
        ...


class LocalAccountSigner:
    """MandateSigner backed by an in-process eth_account LocalAccount."""

    def __init__(self, account: LocalAccount):
        self._account = account

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_message(self, message: bytes) -> bytes:
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return bytes(signed.signature)

    async def sign_typed_data(self, typed_data: dict[str, Any]) -> bytes:
        signed = self._account.sign_message(encode_typed_data(full_message=typed_data))
        return bytes(signed.signature)


def as_signer(signer: MandateSigner | LocalAccount) -> MandateSigner:
    if isinstance(signer, LocalAccount):
        return LocalAccountSigner(signer)
    return signer


async def sign_mandate(
    mandate: "Mandate",
    role: Role | str,
    signer: MandateSigner | LocalAccount,
    alg: SignatureAlgorithm | str = SignatureAlgorithm.PERSONAL_MESSAGE,
    domain: Optional[Mapping[str, Any]] = None,
) -> Signature:
    """Sign the mandate's current state for a role and attach the signature.

    Any earlier signature for the same role is replaced. The slot is only
    written once the signer returns, so a cancelled or failed signing call
    leaves the mandate untouched.

    Raises:
        UnsupportedAlgorithm: alg is not eip191/eip712
        ConfigurationError: eip712 without a domain carrying a numeric chainId
    """
    role = Role.parse(role)
    alg = SignatureAlgorithm.parse(alg)
    key_holder = as_signer(signer)

    # Validate before hashing so misconfiguration fails without side effects.
    if alg is SignatureAlgorithm.TYPED_DATA:
        validate_domain(domain)

    canonical = mandate.canonical_bytes()
    mandate_hash = hash_hex(canonical)

    with LogContext(mandate_id=mandate.mandate_id, role=role.value):
        expected = mandate.address_for(role).address
        if key_holder.address.lower() != expected.lower():
            logger.warning(
                f"Signer {key_holder.address} does not match {role.value} address {expected}; "
                "verification will reject this signature"
            )

        if alg is SignatureAlgorithm.PERSONAL_MESSAGE:
            raw = await key_holder.sign_message(canonical)
        else:
            raw = await key_holder.sign_typed_data(build_typed_data(domain, mandate_hash))

        signature = Signature(alg=alg, mandate_hash=mandate_hash, signature="0x" + bytes(raw).hex())
        mandate.attach_signature(role, signature)

        logger.info(
            f"Signed mandate as {role.value}",
            extra={"alg": alg.value, "mandate_hash": mandate_hash},
        )
    return signature


__all__ = [
    "MandateSigner",
    "LocalAccountSigner",
    "as_signer",
    "sign_mandate",
]
