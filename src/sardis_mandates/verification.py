"""Mandate signature verification pipeline.

Order matters: the hash check runs before any key recovery, so a document
changed after signing is reported as tampered (HashMismatch) rather than as a
bad signature.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from eth_account import Account
from eth_account.messages import encode_defunct

from .canonical import hash_hex
from .constants import Role, SignatureAlgorithm
from .exceptions import HashMismatch, MissingSignature, SignerMismatch
from .logging_config import LogContext
from .models import MandateVerification, Signature, VerificationResult
from .typed_data import encode_mandate_typed_data, validate_domain

if TYPE_CHECKING:
    from .mandate import Mandate

logger = logging.getLogger(__name__)


def verify_role(
    mandate: "Mandate",
    role: Role | str,
    domain: Optional[Mapping[str, Any]] = None,
) -> VerificationResult:
    """Verify the signature attached for one role.

    Raises:
        MissingSignature: no signature for the role
        HashMismatch: the document no longer hashes to the signed mandate hash
        ConfigurationError: eip712 signature verified without a valid domain
        SignerMismatch: recovered signer is not the role's address
    """
    role = Role.parse(role)
    with LogContext(mandate_id=mandate.mandate_id, role=role.value):
        signature = mandate.get_signature(role)
        if signature is None:
            logger.warning(f"{role.value} signature missing")
            raise MissingSignature(role.value)

        canonical = mandate.canonical_bytes()
        recomputed = hash_hex(canonical)
        if signature.mandate_hash.lower() != recomputed.lower():
            logger.warning(
                f"{role.value} mandate hash mismatch",
                extra={"expected_hash": signature.mandate_hash, "recomputed_hash": recomputed},
            )
            raise HashMismatch(role.value, signature.mandate_hash, recomputed)

        expected = mandate.address_for(role).address
        recovered = _recover_signer(signature, canonical, domain, role, expected)
        if recovered.lower() != expected.lower():
            logger.warning(
                f"{role.value} signer mismatch",
                extra={"expected_address": expected, "recovered_address": recovered},
            )
            raise SignerMismatch(role.value, expected, recovered)

        logger.debug(f"{role.value} signature verified", extra={"alg": signature.alg.value})
        return VerificationResult(
            ok=True,
            recovered_address=recovered,
            recomputed_hash=recomputed,
            alg=signature.alg,
        )


def verify_all(
    mandate: "Mandate",
    client_domain: Optional[Mapping[str, Any]] = None,
    server_domain: Optional[Mapping[str, Any]] = None,
) -> MandateVerification:
    """Verify both roles; the first failure propagates unchanged."""
    return MandateVerification(
        client=verify_role(mandate, Role.CLIENT, client_domain),
        server=verify_role(mandate, Role.SERVER, server_domain),
    )


def _recover_signer(
    signature: Signature,
    canonical: bytes,
    domain: Optional[Mapping[str, Any]],
    role: Role,
    expected: str,
) -> str:
    if signature.alg is SignatureAlgorithm.TYPED_DATA:
        # Domain problems are configuration errors, not bad signatures.
        validate_domain(domain)
        signable = encode_mandate_typed_data(domain, signature.mandate_hash)
    else:
        signable = encode_defunct(primitive=canonical)

    try:
        return Account.recover_message(signable, signature=signature.signature_bytes)
    except Exception as exc:  # noqa: BLE001
        # Undecodable hex, bad length, invalid v/r/s (eth-keys BadSignature).
        logger.warning(f"{role.value} signer recovery failed: {exc}")
        raise SignerMismatch(role.value, expected, None, reason=str(exc)) from exc


__all__ = ["verify_role", "verify_all"]
