"""Artifact classification.

Free-form text is trimmed and tested against an ordered chain of matchers;
the first match wins. Order matters because the patterns overlap:

    IPv4 -> IPv6 -> SHA-256 -> ASN -> email -> domain

Domain is last because it is the least restrictive.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from .models import ArtifactType, Classification

UNRECOGNIZED = "unrecognized format"

_IPV6_CHARS = re.compile(r"^[0-9a-fA-F:]+$")
# Compressed forms ("fe80::", "::1") that a plain group count misses.
_IPV6_COMPRESSED = (
    re.compile(r"^([0-9a-fA-F]{0,4}:){7}[0-9a-fA-F]{0,4}$"),
    re.compile(r"^([0-9a-fA-F]{0,4}:){1,7}:$"),
    re.compile(r"^::([0-9a-fA-F]{0,4}:){0,6}[0-9a-fA-F]{0,4}$"),
)
_SHA256 = re.compile(r"^[0-9a-fA-F]{64}$")
_ASN = re.compile(r"^(AS)?[0-9]{1,10}$", re.IGNORECASE)
_EMAIL = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
_LABEL = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
_TLD = re.compile(r"^[A-Za-z]{2,}$")


def is_ipv4(text: str) -> bool:
    parts = text.split(".")
    if len(parts) != 4:
        return False
    for part in parts:
        if not part.isascii() or not part.isdigit():
            return False
        num = int(part)
        if num > 255:
            return False
        # Rejects leading zeros ("01", "001").
        if str(num) != part:
            return False
    return True


def is_ipv6(text: str) -> bool:
    """Simplified IPv6 acceptance (not full RFC 4291 validation)."""
    if ":" not in text or not _IPV6_CHARS.match(text):
        return False
    groups = [g for g in text.split(":") if g]
    if len(groups) >= 3:
        return True
    return any(p.match(text) for p in _IPV6_COMPRESSED)


def is_sha256(text: str) -> bool:
    return len(text) == 64 and bool(_SHA256.match(text))


def is_asn(text: str) -> bool:
    return bool(_ASN.match(text))


def is_email(text: str) -> bool:
    return bool(_EMAIL.match(text))


def is_domain(text: str) -> bool:
    labels = text.split(".")
    if len(labels) < 2:
        return False
    if not all(_LABEL.match(label) for label in labels):
        return False
    return bool(_TLD.match(labels[-1]))


_CHAIN: tuple[tuple[Callable[[str], bool], ArtifactType], ...] = (
    (is_ipv4, "ip"),
    (is_ipv6, "ip"),
    (is_sha256, "sha256"),
    (is_asn, "asn"),
    (is_email, "mail"),
    (is_domain, "domain"),
)


def detect_type(text: str) -> Optional[ArtifactType]:
    """Return the first matching artifact type for already-trimmed text."""
    for matcher, artifact_type in _CHAIN:
        if matcher(text):
            return artifact_type
    return None


def classify(value: str) -> Classification:
    raw = value.strip()
    if not raw:
        return Classification.empty()

    artifact_type = detect_type(raw)
    if artifact_type is None:
        return Classification.invalid(UNRECOGNIZED)
    return Classification.valid(artifact_type)


def split_lines(text: str) -> list[str]:
    """Split multi-line input into trimmed, non-empty lines."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def classify_lines(text: str) -> list[tuple[str, Classification]]:
    return [(line, classify(line)) for line in split_lines(text)]


def suggestion_for(value: str) -> Optional[str]:
    """Hint for input that failed classification."""
    raw = value.strip()
    if not raw:
        return None

    if "." in raw and "@" not in raw and len(raw) < 64:
        return "may be a domain or IP"
    if len(raw) in (63, 65):
        return "SHA-256 must be exactly 64 characters"
    if raw.lower().startswith("as") and len(raw) < 4:
        return "ASN must look like AS12345 or 12345"
    return UNRECOGNIZED
