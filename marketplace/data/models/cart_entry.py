from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Text

from marketplace.data.database import Base


class CartEntryModel(Base):
    __tablename__ = "cart_entries"

    buyer_id = Column(String(128), ForeignKey("users.id"), primary_key=True)
    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)

    #product snapshot taken when the entry was added
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    detail = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    seller_id = Column(String(128), nullable=False)
    seller_name = Column(String(100), nullable=False)
    status = Column(String(16), nullable=False)

    added_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
