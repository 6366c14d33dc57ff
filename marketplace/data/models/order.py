import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Numeric, UniqueConstraint

from marketplace.data.database import Base

ORDER_PENDING = "Pending"
ORDER_SHIPPED = "Shipped"


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)

    product_id = Column(String(64), nullable=False)
    product_name = Column(String(200), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    product_image_url = Column(String, nullable=True)

    buyer_id = Column(String(128), nullable=False, index=True)
    buyer_name = Column(String(100), nullable=False)
    buyer_address = Column(String, nullable=False)
    buyer_phone = Column(String(32), nullable=False)

    seller_id = Column(String(128), nullable=False, index=True)
    shop_name = Column(String(100), nullable=False)

    payment_slip_url = Column(String, nullable=False)
    tracking_number = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False, default=ORDER_PENDING)  # Pending, Shipped

    order_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_updated = Column(DateTime(timezone=True), nullable=True)

    #a listing is a single item, it can be ordered once
    __table_args__ = (UniqueConstraint("product_id", name="u_order_product"),)
