"""IOC Pivot - classify indicators and pivot to threat-intel lookup services."""

from .catalog import ServiceCatalog, default_services
from .classify import classify
from .context import LookupContext, open_context
from .history import HistoryStore
from .resolver import resolve

__version__ = "1.0.0"
__all__ = [
    "classify",
    "resolve",
    "default_services",
    "ServiceCatalog",
    "HistoryStore",
    "LookupContext",
    "open_context",
]
