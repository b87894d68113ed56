"""Exception hierarchy for mandate documents.

All mandate exceptions inherit from MandateError, so callers can catch the
whole family while still switching on the concrete class or ``error_code``.

Usage:
    from sardis_mandates.exceptions import HashMismatch, MandateError

    try:
        mandate.verify_role("client")
    except HashMismatch as e:
        log.warning("tampered mandate", extra=e.details)

All exceptions have:
- error_code: Machine-readable error code (e.g., "HASH_MISMATCH")
- message: Human-readable error message
- details: Context needed to diagnose the failure (role, hashes, addresses)
- to_dict(): Convert to a serializable error payload
"""
from __future__ import annotations

from typing import Any, Optional


class MandateError(Exception):
    """Base exception for all mandate errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Optional additional context
    """

    error_code: str = "MANDATE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to an error payload."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Construction & Input Errors
# =============================================================================

class ValidationError(MandateError):
    """A required construction field is missing or malformed."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")


class ConfigurationError(MandateError):
    """Missing or invalid domain for a typed-data operation."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class UnsupportedAlgorithm(MandateError):
    """Signature algorithm is not one the protocol defines."""

    error_code = "UNSUPPORTED_ALGORITHM"

    def __init__(
        self,
        algorithm: str,
        supported: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"Unsupported alg: {algorithm}"
        details = details or {}
        details["algorithm"] = algorithm
        if supported:
            details["supported_algorithms"] = supported
            message += f". Supported: {', '.join(supported)}"
        super().__init__(message, details=details)


class MalformedIdentifier(MandateError):
    """Chain-qualified identifier is not ``namespace:chainId:address``."""

    error_code = "MALFORMED_IDENTIFIER"

    def __init__(
        self,
        identifier: Any,
        reason: str = "expected namespace:chainId:address",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["identifier"] = identifier
        super().__init__(f"Malformed chain identifier {identifier!r}: {reason}", details=details)


class EncodingError(MandateError):
    """A value cannot be canonicalized."""

    error_code = "ENCODING_ERROR"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = path
            message = f"{message} at {path}"
        super().__init__(message, details=details)


# =============================================================================
# Verification Errors
# =============================================================================

class VerificationError(MandateError):
    """Base class for role verification failures."""

    error_code = "VERIFICATION_ERROR"

    def __init__(
        self,
        message: str,
        role: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        details["role"] = role
        super().__init__(message, details=details)

    @property
    def role(self) -> str:
        return self.details["role"]


class MissingSignature(VerificationError):
    """No signature attached for the role."""

    error_code = "MISSING_SIGNATURE"

    def __init__(self, role: str) -> None:
        super().__init__(f"{role}Sig missing", role=role)


class HashMismatch(VerificationError):
    """Stored mandate hash does not match the document's current hash."""

    error_code = "HASH_MISMATCH"

    def __init__(self, role: str, expected_hash: str, recomputed_hash: str) -> None:
        super().__init__(
            f"{role}Sig.mandateHash mismatch: signed {expected_hash}, document hashes to {recomputed_hash}",
            role=role,
            details={
                "expected_hash": expected_hash,
                "recomputed_hash": recomputed_hash,
            },
        )


class SignerMismatch(VerificationError):
    """Recovered signer is not the role's address (or could not be recovered)."""

    error_code = "SIGNER_MISMATCH"

    def __init__(
        self,
        role: str,
        expected_address: str,
        recovered_address: Optional[str],
        reason: Optional[str] = None,
    ) -> None:
        if recovered_address is None:
            message = f"{role} signature invalid: expected {expected_address}, could not recover signer"
            if reason:
                message += f" ({reason})"
        else:
            message = f"{role} signature invalid: expected {expected_address}, got {recovered_address}"
        super().__init__(
            message,
            role=role,
            details={
                "expected_address": expected_address,
                "recovered_address": recovered_address,
            },
        )


# =============================================================================
# Primitive Registry Errors
# =============================================================================

class RegistryError(MandateError):
    """Primitive registry could not be fetched."""

    error_code = "REGISTRY_ERROR"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)


class PrimitiveNotFound(MandateError):
    """Primitive kind is not listed in the registry."""

    error_code = "PRIMITIVE_NOT_FOUND"

    def __init__(self, kind: str, base_url: Optional[str] = None) -> None:
        details: dict[str, Any] = {"kind": kind}
        if base_url:
            details["base_url"] = base_url
        super().__init__(f"Primitive kind '{kind}' not found in registry", details=details)


__all__ = [
    "MandateError",
    "ValidationError",
    "ConfigurationError",
    "UnsupportedAlgorithm",
    "MalformedIdentifier",
    "EncodingError",
    "VerificationError",
    "MissingSignature",
    "HashMismatch",
    "SignerMismatch",
    "RegistryError",
    "PrimitiveNotFound",
]
