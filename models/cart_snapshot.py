from sqlalchemy import Column, String, Text, DateTime, func

from models.base import Base


class CartSnapshot(Base):
    """Durable copy of one customer's cart, keyed by cart_<customer_id>."""
    __tablename__ = "cart_snapshots"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)  # JSON-encoded list of cart lines
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
