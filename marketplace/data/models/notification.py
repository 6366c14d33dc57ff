import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Boolean

from marketplace.data.database import Base

TYPE_ORDER = "order"
TYPE_DELIVERY = "delivery"


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    type = Column(String(16), nullable=False)  # order, delivery

    title = Column(String(200), nullable=False)
    message = Column(String, nullable=False)

    seller_id = Column(String(128), nullable=False, index=True)
    buyer_id = Column(String(128), nullable=False, index=True)
    order_id = Column(String(64), nullable=False, index=True)
    product_id = Column(String(64), nullable=False)

    is_read = Column(Boolean, nullable=False, default=False)
    tracking_number = Column(String(64), nullable=True)

    timestamp = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_updated = Column(DateTime(timezone=True), nullable=True)

    @property
    def tracking_status(self) -> str:
        return "Entered" if self.tracking_number else "Not entered"
