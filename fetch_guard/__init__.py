"""Outbound fetch safety checks (SSRF guard) for user-supplied URLs."""

from fetch_guard._classifier import AddressLabel, classify
from fetch_guard._errors import UnsafeUrlError, public_message
from fetch_guard.validator import (
    ParsedUrl,
    RejectionReason,
    Verdict,
    is_url_safe,
    validate,
    validate_sync,
)

__all__ = [
    "AddressLabel",
    "ParsedUrl",
    "RejectionReason",
    "UnsafeUrlError",
    "Verdict",
    "classify",
    "is_url_safe",
    "public_message",
    "validate",
    "validate_sync",
]
