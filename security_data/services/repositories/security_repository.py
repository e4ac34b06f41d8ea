"""Security data access layer."""

import logging

from sqlalchemy.orm import Session

from security_data.models import Security
from security_data.services.repositories.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class SecurityRepository:
    """Centralized security data access.

    Naming conventions:
    - find_* : Query that may return None or empty list
    - get_* : Query that raises exception if missing
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_ticker(
        self, ticker: str, exchange_operating_mic: str | None = None
    ) -> Security | None:
        """Find a security by ticker, optionally narrowed to one exchange."""
        query = self._db.query(Security).filter(Security.ticker == ticker)
        if exchange_operating_mic is not None:
            query = query.filter(Security.exchange_operating_mic == exchange_operating_mic)
        return query.order_by(Security.id).first()

    def get_by_id(self, security_id: int) -> Security:
        """Get a security by ID or raise NotFoundError."""
        security = self._db.get(Security, security_id)
        if security is None:
            raise NotFoundError("Security", security_id)
        return security

    def save(self, security: Security) -> Security:
        """Persist a new or modified security."""
        self._db.add(security)
        self._db.commit()
        self._db.refresh(security)
        return security
