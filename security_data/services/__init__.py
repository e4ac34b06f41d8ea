"""Services layer - business logic and external integrations.

This module is organized into domain-based subpackages:
- providers/: External securities data vendors and fallback
- repositories/: Data access layer
- securities/: Application-facing securities services
- shared/: Shared utilities (HTTP client, error reporting)

Common imports for convenience:
    from security_data.services import SecurityProviderService
    from security_data.services import SecurityPriceRepository, SecurityRepository
"""

# Re-export commonly used components for convenience
from security_data.services.repositories import (
    NotFoundError,
    RepositoryError,
    SecurityPriceRepository,
    SecurityRepository,
)
from security_data.services.securities import SecurityProviderService

__all__ = [
    # Repositories
    "NotFoundError",
    "RepositoryError",
    "SecurityPriceRepository",
    "SecurityRepository",
    # Securities
    "SecurityProviderService",
]
