"""Calendar domain layer."""

from .credentials import (
    DEFAULT_REFRESH_LEEWAY,
    CredentialErrorCode,
    CredentialRecord,
    CredentialState,
    TokenResult,
)

__all__ = [
    "DEFAULT_REFRESH_LEEWAY",
    "CredentialErrorCode",
    "CredentialRecord",
    "CredentialState",
    "TokenResult",
]
