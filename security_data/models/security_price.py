"""Security price history model."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from security_data.database import Base


class SecurityPrice(Base):
    """Daily price for a security, cached from a data provider."""

    __tablename__ = "security_prices"
    __table_args__ = (
        UniqueConstraint("security_id", "date", name="uq_security_price_date"),
        Index("idx_security_prices_security_date", "security_id", "date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    security_id: Mapped[int] = mapped_column(ForeignKey("securities.id", ondelete="CASCADE"))
    date: Mapped[date] = mapped_column(Date)
    price: Mapped[Decimal] = mapped_column(Numeric(19, 4))
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    security: Mapped["Security"] = relationship(back_populates="prices")

    def __repr__(self) -> str:
        return f"<SecurityPrice(security_id={self.security_id}, date={self.date}, price={self.price})>"
