"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. Services should use repositories for data access rather
than directly querying SQLAlchemy models.

Dependency direction: Services -> Repositories -> Models
"""

from .exceptions import NotFoundError, RepositoryError
from .security_price_repository import SecurityPriceRepository
from .security_repository import SecurityRepository

__all__ = [
    "NotFoundError",
    "RepositoryError",
    "SecurityPriceRepository",
    "SecurityRepository",
]
