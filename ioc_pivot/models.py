"""Models for ioc-pivot.

We keep the core library lightweight (no pydantic dependency outside the web layer).
These dataclasses are the stable shapes shared by the classifier, the service
catalog, the resolver and the search history.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal, Optional

ArtifactType = Literal["ip", "domain", "sha256", "asn", "mail"]

# Canonical order, also used when grouping the catalog and statistics.
ARTIFACT_TYPES: tuple[ArtifactType, ...] = ("ip", "domain", "sha256", "asn", "mail")

DISPLAY_LABELS: dict[ArtifactType, str] = {
    "ip": "IP",
    "domain": "Domain",
    "sha256": "SHA-256",
    "asn": "ASN",
    "mail": "Email",
}


def is_artifact_type(value: Any) -> bool:
    return value in ARTIFACT_TYPES


def display_label(artifact_type: ArtifactType) -> str:
    return DISPLAY_LABELS[artifact_type]


@dataclass(frozen=True)
class Classification:
    """Outcome of classifying one input string.

    Exactly one of three states holds:
    - valid:   `type` is set, `reason` is None
    - invalid: `reason` is set, `type` is None
    - empty:   both are None
    """

    status: Literal["valid", "invalid", "empty"]
    type: Optional[ArtifactType] = None
    reason: Optional[str] = None

    @classmethod
    def valid(cls, artifact_type: ArtifactType) -> "Classification":
        return cls(status="valid", type=artifact_type)

    @classmethod
    def invalid(cls, reason: str) -> "Classification":
        return cls(status="invalid", reason=reason)

    @classmethod
    def empty(cls) -> "Classification":
        return cls(status="empty")

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status, "type": self.type, "reason": self.reason}

    def __str__(self) -> str:
        if self.status == "valid":
            return f"valid {self.type}"
        if self.status == "invalid":
            return f"invalid: {self.reason}"
        return "empty"


@dataclass(frozen=True)
class LookupService:
    # Stable id, used as the key of the persisted enabled-state map.
    id: str
    name: str

    # Contains the literal `{value}` placeholder exactly once.
    url_template: str
    category: ArtifactType
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "url_template": self.url_template,
            "category": self.category,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class SearchRecord:
    id: str
    value: str
    type: ArtifactType
    timestamp: datetime  # timezone-aware (UTC)

    @property
    def display_type(self) -> str:
        return display_label(self.type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "type": self.type,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchRecord":
        """Rebuild a record from its persisted shape.

        Raises ValueError/KeyError/TypeError on malformed data; callers decide
        whether to skip the record.
        """
        artifact_type = data["type"]
        if not is_artifact_type(artifact_type):
            raise ValueError(f"Unknown artifact type: {artifact_type!r}")
        timestamp = datetime.fromisoformat(str(data["timestamp"]))
        return cls(
            id=str(data["id"]),
            value=str(data["value"]),
            type=artifact_type,
            timestamp=timestamp,
        )
