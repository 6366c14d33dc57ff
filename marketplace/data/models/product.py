import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Text

from marketplace.data.database import Base

STATUS_AVAILABLE = "available"
STATUS_SOLD = "sold"
STATUS_RESERVED = "reserved"
STATUS_NO_STATUS = "no-status"


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    seller_id = Column(String(128), ForeignKey("users.id"), nullable=False, index=True)
    seller_name = Column(String(100), nullable=False)

    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    detail = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)

    status = Column(String(16), nullable=False, default=STATUS_AVAILABLE, index=True)  # available, sold, reserved, no-status
    buyer_id = Column(String(128), nullable=True)
    sold_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
