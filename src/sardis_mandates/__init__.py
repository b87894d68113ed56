"""Signed client/server mandates: canonical hashing, EIP-191/EIP-712 signing and verification."""

from .caip10 import ChainAddress, address_from_caip10, caip10
from .canonical import canonical_json, canonicalize, hash_hex, keccak256
from .config import MandateSettings, get_settings
from .constants import MANDATE_VERSION, Role, SignatureAlgorithm
from .exceptions import (
    ConfigurationError,
    EncodingError,
    HashMismatch,
    MalformedIdentifier,
    MandateError,
    MissingSignature,
    PrimitiveNotFound,
    RegistryError,
    SignerMismatch,
    UnsupportedAlgorithm,
    ValidationError,
    VerificationError,
)
from .logging_config import LogContext, setup_logging
from .mandate import Mandate
from .models import MandateRecord, MandateVerification, PrimitiveCore, Signature, VerificationResult
from .primitives import PrimitiveRegistryClient, PrimitiveRegistryLike
from .schemas import PrimitiveEntry, PrimitiveRegistry
from .signing import LocalAccountSigner, MandateSigner, sign_mandate
from .typed_data import build_typed_data
from .verification import verify_all, verify_role

__version__ = "0.1.0"

__all__ = [
    # Documents
    "Mandate",
    "MandateRecord",
    "PrimitiveCore",
    "Signature",
    "MANDATE_VERSION",
    "Role",
    "SignatureAlgorithm",
    # Identifiers
    "ChainAddress",
    "caip10",
    "address_from_caip10",
    # Canonical hashing
    "canonicalize",
    "canonical_json",
    "keccak256",
    "hash_hex",
    # Signing
    "MandateSigner",
    "LocalAccountSigner",
    "sign_mandate",
    "build_typed_data",
    # Verification
    "verify_role",
    "verify_all",
    "VerificationResult",
    "MandateVerification",
    # Primitive registry
    "PrimitiveRegistryClient",
    "PrimitiveRegistryLike",
    "PrimitiveRegistry",
    "PrimitiveEntry",
    # Configuration and logging
    "MandateSettings",
    "get_settings",
    "setup_logging",
    "LogContext",
    # Errors
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
