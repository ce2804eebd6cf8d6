from .builtins import default_services
from .registry import ServiceCatalog

__all__ = ["ServiceCatalog", "default_services"]
