"""Application-facing securities services."""

from .price_importer import SecurityPriceImporter
from .security_provider_service import SecurityInfoMissingError, SecurityProviderService

__all__ = [
    "SecurityInfoMissingError",
    "SecurityPriceImporter",
    "SecurityProviderService",
]
