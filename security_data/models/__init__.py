"""SQLAlchemy ORM models."""

from security_data.models.security import Security
from security_data.models.security_price import SecurityPrice

__all__ = [
    "Security",
    "SecurityPrice",
]
