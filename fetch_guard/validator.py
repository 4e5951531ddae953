"""Outbound fetch validator: decide whether a user-supplied URL may be fetched.

Two entry points:

- ``validate_sync(url)``: parse, scheme gate, literal host check. No I/O.
- ``await validate(url)``: the above, then DNS confirmation of every
  resolved address. Callers must use this before connecting and again on
  every redirect target.

Both return a ``Verdict``; unsafe input never raises. Anything ambiguous
(unparsable, unresolvable, timed out) is unsafe.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from urllib.parse import urlsplit

from fetch_guard._classifier import AddressLabel, classify, is_blocked
from fetch_guard._errors import require_url_argument
from fetch_guard._protocol import ALLOWED_SCHEMES, is_allowed_scheme
from fetch_guard._resolution import (
    ResolutionError,
    Resolver,
    resolve_and_classify,
    system_resolver,
)
from fetch_guard.audit import record_verdict
from fetch_guard.config import get_settings


class RejectionReason(str, enum.Enum):
    INVALID_URL = "InvalidUrl"
    UNSUPPORTED_PROTOCOL = "UnsupportedProtocol"
    BLOCKED_HOST = "BlockedHost"
    BLOCKED_ADDRESS = "BlockedAddress"
    RESOLUTION_FAILURE = "ResolutionFailure"


@dataclass(frozen=True)
class ParsedUrl:
    scheme: str
    host: str
    port: int | None
    path: str
    query: str
    text: str   # normalized URL that was validated


@dataclass(frozen=True)
class Verdict:
    safe: bool
    reason: RejectionReason | None = None
    resolved_addresses: tuple[str, ...] | None = None
    # Audit-only context; never show to end users.
    label: AddressLabel | None = None
    detail: str = ""
    # Set on every verdict whose input parsed.
    url: ParsedUrl | None = None

    @classmethod
    def allow(
        cls,
        addresses: tuple[str, ...] | None = None,
        *,
        url: ParsedUrl | None = None,
    ) -> Verdict:
        return cls(safe=True, resolved_addresses=addresses, url=url)

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        detail: str,
        *,
        label: AddressLabel | None = None,
        addresses: tuple[str, ...] | None = None,
        url: ParsedUrl | None = None,
    ) -> Verdict:
        return cls(
            safe=False, reason=reason, resolved_addresses=addresses,
            label=label, detail=detail, url=url,
        )


def _has_bad_host_chars(host: str) -> bool:
    return any(c.isspace() or ord(c) < 0x20 or ord(c) == 0x7F for c in host)


def parse_url(raw: str) -> ParsedUrl:
    """Split *raw* into its parts. Raises ValueError when it is not a usable URL."""
    text = raw.strip()
    if not text:
        raise ValueError("empty URL")

    parts = urlsplit(text)
    scheme = parts.scheme.lower()
    if not scheme:
        raise ValueError("missing scheme")

    host = parts.hostname or ""
    port = parts.port  # ValueError for non-numeric or out-of-range ports
    if scheme in ALLOWED_SCHEMES and not host:
        raise ValueError("missing host")
    if _has_bad_host_chars(host):
        raise ValueError("host contains whitespace or control characters")

    return ParsedUrl(
        scheme=scheme,
        host=host,
        port=port,
        path=parts.path,
        query=parts.query,
        text=parts.geturl(),
    )


def _precheck(url: str) -> tuple[ParsedUrl | None, Verdict]:
    """Parse -> scheme gate -> literal host check. Pure, no I/O."""
    try:
        parsed = parse_url(url)
    except ValueError as e:
        return None, Verdict.reject(RejectionReason.INVALID_URL, f"unparsable URL: {e}")

    if not is_allowed_scheme(parsed.scheme):
        return parsed, Verdict.reject(
            RejectionReason.UNSUPPORTED_PROTOCOL, f"scheme {parsed.scheme!r} not allowed",
            url=parsed,
        )

    label = classify(parsed.host)
    if is_blocked(label):
        return parsed, Verdict.reject(
            RejectionReason.BLOCKED_HOST, f"host {parsed.host!r} is {label.value}",
            label=label, url=parsed,
        )

    return parsed, Verdict.allow(url=parsed)


def validate_sync(url: str) -> Verdict:
    """Cheap pre-filter: parse, scheme and literal host checks only (no DNS).

    Deterministic for a given input. A safe result here is NOT sufficient
    to fetch; call ``validate()`` before connecting.
    """
    require_url_argument(url)
    _, verdict = _precheck(url)
    record_verdict(url, verdict)
    return verdict


async def validate(
    url: str,
    *,
    resolver: Resolver | None = None,
    timeout: float | None = None,
) -> Verdict:
    """Full check: ``validate_sync`` then DNS confirmation of every address.

    Args:
        url: The user-supplied URL.
        resolver: Async lookup returning all addresses for a hostname.
            Defaults to the system resolver.
        timeout: Lookup bound in seconds. Defaults to
            ``settings.dns_timeout_seconds``. Exceeding it is a
            ResolutionFailure.

    Cancelling the awaiting task cancels the pending lookup; the
    CancelledError propagates.

    Raises:
        ValueError: *timeout* is zero or negative.
        pydantic.ValidationError: no *timeout* was given and the
            configured settings are invalid. This is a configuration
            error, not a verdict on the URL.
    """
    require_url_argument(url)
    if timeout is not None and timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    parsed, verdict = _precheck(url)
    if not verdict.safe or parsed is None:
        record_verdict(url, verdict)
        return verdict

    if timeout is None:
        timeout = get_settings().dns_timeout_seconds

    try:
        result = await resolve_and_classify(
            parsed.host, resolver=resolver or system_resolver, timeout=timeout,
        )
    except ResolutionError as e:
        verdict = Verdict.reject(RejectionReason.RESOLUTION_FAILURE, str(e), url=parsed)
    else:
        if result.safe:
            verdict = Verdict.allow(result.addresses, url=parsed)
        else:
            address, label = result.blocked[0]
            reason = (
                RejectionReason.BLOCKED_ADDRESS if result.resolved
                else RejectionReason.BLOCKED_HOST
            )
            verdict = Verdict.reject(
                reason,
                f"{parsed.host!r} -> {address} is {label.value}",
                label=label,
                addresses=result.addresses or None,
                url=parsed,
            )

    record_verdict(url, verdict)
    return verdict


async def is_url_safe(
    url: str,
    *,
    resolver: Resolver | None = None,
    timeout: float | None = None,
) -> bool:
    """Shorthand for ``(await validate(url)).safe``."""
    verdict = await validate(url, resolver=resolver, timeout=timeout)
    return verdict.safe
