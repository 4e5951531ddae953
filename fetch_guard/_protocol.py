"""Scheme gate: only plain web schemes may be fetched."""

ALLOWED_SCHEMES: frozenset[str] = frozenset({"http", "https"})

# Listed explicitly so the deny side is auditable. Anything outside
# ALLOWED_SCHEMES is rejected whether or not it appears here.
DENIED_SCHEMES: frozenset[str] = frozenset({
    "file",     # local filesystem
    "ftp",
    "gopher",   # raw TCP payload smuggling
    "data",
    "dict",
    "php",
    "expect",
    "jar",
})


def is_allowed_scheme(scheme: str) -> bool:
    """Return True if *scheme* (with or without a trailing colon) may be fetched."""
    normalized = scheme.strip().lower().rstrip(":")
    if normalized in DENIED_SCHEMES:
        return False
    return normalized in ALLOWED_SCHEMES
