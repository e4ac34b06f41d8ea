"""Security model - represents a tradable stock or fund."""

from datetime import datetime

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from security_data.database import Base


class Security(Base):
    """A listed security identified by ticker and exchange."""

    __tablename__ = "securities"
    __table_args__ = (
        UniqueConstraint("ticker", "exchange_operating_mic", name="uq_security_ticker_exchange"),
        Index("idx_securities_ticker", "ticker"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    ticker: Mapped[str] = mapped_column(String(50))
    name: Mapped[str | None] = mapped_column(String(200))
    logo_url: Mapped[str | None] = mapped_column(String(500))
    exchange_operating_mic: Mapped[str | None] = mapped_column(String(10))  # ISO 10383 MIC
    country_code: Mapped[str | None] = mapped_column(String(2))
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(server_default=func.now(), onupdate=func.now())

    # Relationships
    prices: Mapped[list["SecurityPrice"]] = relationship(
        back_populates="security", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Security(ticker={self.ticker}, exchange_operating_mic={self.exchange_operating_mic})>"
