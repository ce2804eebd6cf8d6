"""Resolve an artifact to lookup URLs.

Substitutes the value into every service template of the category and keeps
the results that form a well-formed URL. Malformed results are dropped; the
remaining services still resolve.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from .catalog import ServiceCatalog
from .models import ArtifactType, LookupService, is_artifact_type

PLACEHOLDER = "{value}"

# RFC 3986 unreserved + reserved characters, plus '%' for escapes.
_URL_CHARS = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_value(artifact_type: ArtifactType, value: str) -> str:
    """Trim, and for ASNs drop a leading case-insensitive "AS" prefix."""
    raw = value.strip()
    if artifact_type == "asn" and raw[:2].upper() == "AS":
        return raw[2:]
    return raw


def is_valid_url(candidate: str) -> bool:
    if not _URL_CHARS.match(candidate):
        return False
    if _BAD_ESCAPE.search(candidate):
        return False
    # A fragment cannot itself contain '#'.
    if candidate.count("#") > 1:
        return False
    parsed = urlparse(candidate)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def resolve_services(
    catalog: ServiceCatalog,
    artifact_type: ArtifactType,
    value: str,
    enabled_only: bool = True,
) -> list[tuple[LookupService, str]]:
    """Return (service, url) pairs in catalog order."""
    if not is_artifact_type(artifact_type):
        raise ValueError(f"Unknown artifact type: {artifact_type!r}")

    clean = normalize_value(artifact_type, value)
    if not clean:
        return []

    if enabled_only:
        services = catalog.enabled_services(artifact_type)
    else:
        services = catalog.all_services(artifact_type)

    out: list[tuple[LookupService, str]] = []
    for service in services:
        url = service.url_template.replace(PLACEHOLDER, clean)
        if is_valid_url(url):
            out.append((service, url))
    return out


def resolve(
    catalog: ServiceCatalog,
    artifact_type: ArtifactType,
    value: str,
    enabled_only: bool = True,
) -> list[str]:
    return [url for _service, url in resolve_services(catalog, artifact_type, value, enabled_only)]
