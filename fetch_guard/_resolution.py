"""DNS-backed confirmation: every address a hostname resolves to must be public."""

from __future__ import annotations

import asyncio
import logging
import socket
from dataclasses import dataclass
from typing import Protocol, Sequence

from fetch_guard._classifier import AddressLabel, classify, is_blocked, parse_address

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 3.0


class Resolver(Protocol):
    """Async name lookup returning every address for *hostname* as text."""

    async def __call__(self, hostname: str) -> Sequence[str]: ...


class ResolutionError(Exception):
    """Lookup failed, timed out, returned nothing, or returned garbage."""


@dataclass(frozen=True)
class ResolutionResult:
    safe: bool
    addresses: tuple[str, ...] = ()
    # (address or hostname, label) for every entry that tripped a rule
    blocked: tuple[tuple[str, AddressLabel], ...] = ()
    resolved: bool = True   # False when the literal check short-circuited


async def system_resolver(hostname: str) -> list[str]:
    """Resolve through the event loop's getaddrinfo (runs in the default executor)."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, proto=socket.IPPROTO_TCP)
    addresses: list[str] = []
    for family, _, _, _, sockaddr in infos:
        if family not in (socket.AF_INET, socket.AF_INET6):
            continue
        host = sockaddr[0]
        if isinstance(host, str) and host not in addresses:
            addresses.append(host)
    return addresses


async def _lookup(hostname: str, resolver: Resolver, timeout: float) -> list[str]:
    try:
        answers = await asyncio.wait_for(resolver(hostname), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ResolutionError(f"lookup for {hostname!r} timed out after {timeout}s") from e
    except asyncio.CancelledError:
        logger.debug("lookup for %r cancelled", hostname)
        raise
    except Exception as e:
        raise ResolutionError(f"lookup for {hostname!r} failed: {e}") from e

    addresses = [str(a) for a in answers or ()]
    if not addresses:
        raise ResolutionError(f"lookup for {hostname!r} returned no addresses")
    return addresses


async def resolve_and_classify(
    hostname: str,
    *,
    resolver: Resolver = system_resolver,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ResolutionResult:
    """Resolve *hostname* and classify every answer.

    A hostname already blocked as a literal returns unsafe without any
    lookup. A public IP literal is its own answer. Otherwise all returned
    addresses are classified and the result is safe only if every one of
    them is public; a single private answer among public ones is unsafe.

    Raises ResolutionError when the lookup fails, times out, returns no
    addresses or returns something that is not an IP address. Cancelling
    the awaiting task cancels the pending lookup.
    """
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")

    literal_label = classify(hostname)
    if is_blocked(literal_label):
        return ResolutionResult(
            safe=False, blocked=((hostname, literal_label),), resolved=False,
        )

    literal = parse_address(hostname)
    if literal is not None:
        return ResolutionResult(safe=True, addresses=(str(literal),), resolved=False)

    addresses = await _lookup(hostname, resolver, timeout)

    blocked: list[tuple[str, AddressLabel]] = []
    for address in addresses:
        if parse_address(address) is None:
            raise ResolutionError(f"lookup for {hostname!r} returned a non-IP answer: {address!r}")
        label = classify(address)
        if is_blocked(label):
            blocked.append((address, label))

    if blocked:
        logger.debug("%s resolved to blocked addresses %s", hostname, blocked)
    return ResolutionResult(
        safe=not blocked, addresses=tuple(addresses), blocked=tuple(blocked),
    )
