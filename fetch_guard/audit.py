"""Audit sink for verdicts: log records plus an OpenTelemetry span event."""

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from fetch_guard.validator import Verdict

logger = logging.getLogger(__name__)

VERDICT_EVENT = "fetch_guard.verdict"
_MAX_LOGGED_URL_CHARS = 300


def _clip(url: str) -> str:
    if len(url) <= _MAX_LOGGED_URL_CHARS:
        return url
    return url[:_MAX_LOGGED_URL_CHARS] + "..."


def verdict_attributes(url: str, verdict: "Verdict") -> dict[str, str | bool]:
    """Flatten a verdict into OTel-compatible attributes (no None values)."""
    attrs: dict[str, str | bool] = {
        "fetch_guard.url": _clip(url),
        "fetch_guard.safe": verdict.safe,
    }
    if verdict.reason is not None:
        attrs["fetch_guard.reason"] = verdict.reason.value
    if verdict.label is not None:
        attrs["fetch_guard.label"] = verdict.label.value
    if verdict.resolved_addresses:
        attrs["fetch_guard.addresses"] = ",".join(verdict.resolved_addresses)
    if verdict.detail:
        attrs["fetch_guard.detail"] = verdict.detail
    return attrs


def record_verdict(url: str, verdict: "Verdict") -> None:
    """Record a verdict. Never raises; auditing cannot change the outcome."""
    try:
        if verdict.safe:
            logger.debug("allowed %s -> %s", _clip(url), verdict.resolved_addresses or "no lookup")
        else:
            logger.warning(
                "rejected %s: %s (%s)",
                _clip(url), verdict.reason.value, verdict.detail or "no detail",
            )
        span = trace.get_current_span()
        if span.is_recording():
            span.add_event(VERDICT_EVENT, attributes=verdict_attributes(url, verdict))
    except Exception as e:
        logger.error("audit of verdict for %s failed: %s", _clip(url), e)
