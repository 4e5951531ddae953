"""Shared error types and user-facing messages.

Rejections are values (Verdicts), not exceptions. The only exception a
caller sees from this package is UnsafeUrlError, raised by the fetcher
when a hop is blocked. The specific reason goes to the audit log; users
get PUBLIC_REJECTION_MESSAGE so probes learn nothing about the network.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fetch_guard.validator import Verdict


PUBLIC_REJECTION_MESSAGE = "This link cannot be fetched."


class UnsafeUrlError(ValueError):
    """Raised by the fetcher when the URL (or a redirect target) is not safe."""

    def __init__(self, url: str, verdict: "Verdict"):
        self.url = url
        self.verdict = verdict
        reason = verdict.reason.value if verdict.reason else "unknown"
        super().__init__(f"blocked {url!r}: {reason}")


def public_message(verdict: "Verdict") -> str | None:
    """Message safe to show an end user, or None when the verdict is safe."""
    if verdict.safe:
        return None
    return PUBLIC_REJECTION_MESSAGE


def require_url_argument(url: Any) -> str:
    """Reject call-pattern mistakes (None, bytes, ...) as programming errors."""
    if url is None:
        raise TypeError("url must be a str, got None")
    if not isinstance(url, str):
        raise TypeError(f"url must be a str, got {type(url).__name__}")
    return url
