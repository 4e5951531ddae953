"""Static classification table for hostnames and IP literals.

The table below is the whole blocking policy. It is built once at import
time and never mutated. ``classify()`` walks it in order and returns the
label of the first matching rule; anything unmatched is ``PUBLIC``.

Rules with different labels may only overlap when the earlier rule is
strictly contained in the later one (cloud-metadata literals sit inside
the link-local and IPv6 unique-local ranges), so first-match picks the
more specific label.
"""

from __future__ import annotations

import enum
import ipaddress
from dataclasses import dataclass, field

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


class AddressLabel(str, enum.Enum):
    LOOPBACK = "loopback"
    PRIVATE = "private-rfc1918"
    LINK_LOCAL = "link-local"
    MULTICAST_OR_BROADCAST = "multicast-or-broadcast"
    RESERVED_TEST_NET = "reserved-test-net"
    CLOUD_METADATA = "cloud-metadata"
    INTERNAL_SUFFIX = "internal-suffix"   # hostnames only
    PUBLIC = "public"


class RuleKind(enum.Enum):
    NETWORK = "network"     # CIDR range or single IP literal
    HOSTNAME = "hostname"   # exact hostname
    SUFFIX = "suffix"       # hostname ending


@dataclass(frozen=True)
class ClassificationRule:
    kind: RuleKind
    pattern: str
    label: AddressLabel
    network: IPNetwork | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.kind is RuleKind.NETWORK:
            object.__setattr__(self, "network", ipaddress.ip_network(self.pattern))
        elif self.pattern != self.pattern.lower():
            raise ValueError(f"hostname pattern must be lowercase: {self.pattern!r}")

    def matches(self, host: str, address: IPAddress | None) -> bool:
        """Match a normalized host (and its parsed address, if it is an IP literal)."""
        if self.kind is RuleKind.NETWORK:
            return address is not None and address in self.network
        if address is not None:
            return False
        if self.kind is RuleKind.HOSTNAME:
            return host == self.pattern
        return host.endswith(self.pattern)


def _net(pattern: str, label: AddressLabel) -> ClassificationRule:
    return ClassificationRule(RuleKind.NETWORK, pattern, label)


def _host(pattern: str, label: AddressLabel) -> ClassificationRule:
    return ClassificationRule(RuleKind.HOSTNAME, pattern, label)


def _suffix(pattern: str, label: AddressLabel) -> ClassificationRule:
    return ClassificationRule(RuleKind.SUFFIX, pattern, label)


RULES: tuple[ClassificationRule, ...] = (
    # Cloud metadata (before link-local / unique-local, which contain them)
    _net("169.254.169.254/32", AddressLabel.CLOUD_METADATA),    # AWS, Azure, GCP
    _net("169.254.170.2/32", AddressLabel.CLOUD_METADATA),      # AWS ECS task metadata
    _net("fd00:ec2::254/128", AddressLabel.CLOUD_METADATA),     # AWS IMDS over IPv6
    _host("metadata.google.internal", AddressLabel.CLOUD_METADATA),
    # Loopback
    _net("127.0.0.0/8", AddressLabel.LOOPBACK),
    _net("::1/128", AddressLabel.LOOPBACK),
    _host("localhost", AddressLabel.LOOPBACK),
    # RFC 1918
    _net("10.0.0.0/8", AddressLabel.PRIVATE),
    _net("172.16.0.0/12", AddressLabel.PRIVATE),
    _net("192.168.0.0/16", AddressLabel.PRIVATE),
    # Link-local
    _net("169.254.0.0/16", AddressLabel.LINK_LOCAL),
    _net("fe80::/10", AddressLabel.LINK_LOCAL),
    # Multicast and broadcast
    _net("224.0.0.0/4", AddressLabel.MULTICAST_OR_BROADCAST),
    _net("255.255.255.255/32", AddressLabel.MULTICAST_OR_BROADCAST),
    # IPv6 unique-local
    _net("fd00::/8", AddressLabel.PRIVATE),
    _net("fc00::/7", AddressLabel.PRIVATE),
    # Reserved and documentation ranges
    _net("0.0.0.0/8", AddressLabel.RESERVED_TEST_NET),
    _net("192.0.2.0/24", AddressLabel.RESERVED_TEST_NET),     # TEST-NET-1
    _net("198.51.100.0/24", AddressLabel.RESERVED_TEST_NET),  # TEST-NET-2
    _net("203.0.113.0/24", AddressLabel.RESERVED_TEST_NET),   # TEST-NET-3
    # Internal-only DNS suffixes
    _suffix(".local", AddressLabel.INTERNAL_SUFFIX),     # mDNS
    _suffix(".internal", AddressLabel.INTERNAL_SUFFIX),
)


def _normalize_host(host: str) -> str:
    host = host.strip().lower()
    # "svc.internal." is the fully-qualified form of "svc.internal"
    if host.endswith(".") and len(host) > 1:
        host = host[:-1]
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host


def parse_address(host: str) -> IPAddress | None:
    """Parse an IP literal, or return None for a hostname.

    IPv6 zone identifiers are dropped and IPv4-mapped IPv6 addresses are
    returned as their embedded IPv4 address.
    """
    try:
        address = ipaddress.ip_address(_normalize_host(host))
    except ValueError:
        return None
    if isinstance(address, ipaddress.IPv6Address):
        if address.scope_id is not None:
            address = ipaddress.IPv6Address(str(address).split("%", 1)[0])
        if address.ipv4_mapped is not None:
            return address.ipv4_mapped
    return address


def classify(host: str) -> AddressLabel:
    """Classify a hostname or IP literal against RULES (case-insensitive)."""
    normalized = _normalize_host(host)
    address = parse_address(normalized)
    for rule in RULES:
        if rule.matches(normalized, address):
            return rule.label
    return AddressLabel.PUBLIC


def is_blocked(label: AddressLabel) -> bool:
    return label is not AddressLabel.PUBLIC
