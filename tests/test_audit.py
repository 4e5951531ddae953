"""Tests for the audit sink and user-facing messages."""

import logging

from fetch_guard import RejectionReason, Verdict, public_message
from fetch_guard import audit
from fetch_guard._classifier import AddressLabel
from fetch_guard._errors import PUBLIC_REJECTION_MESSAGE, UnsafeUrlError


class _RecordingSpan:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def is_recording(self) -> bool:
        return True

    def add_event(self, name, attributes=None):
        self.events.append((name, dict(attributes or {})))


def _blocked() -> Verdict:
    return Verdict.reject(
        RejectionReason.BLOCKED_ADDRESS,
        "'evil.example' -> 10.0.0.1 is private-rfc1918",
        label=AddressLabel.PRIVATE,
        addresses=("93.184.216.34", "10.0.0.1"),
    )


def test_public_message_is_generic():
    assert public_message(Verdict.allow()) is None
    message = public_message(_blocked())
    assert message == PUBLIC_REJECTION_MESSAGE
    assert "10.0.0.1" not in message
    assert "private" not in message.lower()


def test_rejection_logged_at_warning(caplog):
    with caplog.at_level(logging.DEBUG, logger="fetch_guard.audit"):
        audit.record_verdict("https://evil.example/", _blocked())
    [record] = caplog.records
    assert record.levelno == logging.WARNING
    assert "BlockedAddress" in record.getMessage()


def test_allowed_logged_at_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="fetch_guard.audit"):
        audit.record_verdict("https://example.com/", Verdict.allow(("93.184.216.34",)))
    [record] = caplog.records
    assert record.levelno == logging.DEBUG


def test_span_event_attributes(monkeypatch):
    span = _RecordingSpan()
    monkeypatch.setattr(audit.trace, "get_current_span", lambda: span)
    audit.record_verdict("https://evil.example/", _blocked())

    [(name, attrs)] = span.events
    assert name == audit.VERDICT_EVENT
    assert attrs["fetch_guard.safe"] is False
    assert attrs["fetch_guard.reason"] == "BlockedAddress"
    assert attrs["fetch_guard.label"] == "private-rfc1918"
    assert attrs["fetch_guard.addresses"] == "93.184.216.34,10.0.0.1"
    assert None not in attrs.values()


def test_long_urls_clipped():
    attrs = audit.verdict_attributes("https://example.com/" + "a" * 1000, Verdict.allow())
    assert len(attrs["fetch_guard.url"]) < 400
    assert "fetch_guard.reason" not in attrs


def test_audit_failure_does_not_raise(monkeypatch, caplog):
    def broken():
        raise RuntimeError("exporter down")

    monkeypatch.setattr(audit.trace, "get_current_span", broken)
    with caplog.at_level(logging.ERROR, logger="fetch_guard.audit"):
        audit.record_verdict("https://example.com/", Verdict.allow())
    assert "exporter down" in caplog.text


def test_unsafe_url_error_carries_verdict():
    verdict = _blocked()
    err = UnsafeUrlError("https://evil.example/", verdict)
    assert isinstance(err, ValueError)
    assert err.verdict is verdict
    assert "BlockedAddress" in str(err)
