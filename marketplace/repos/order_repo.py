# marketplace/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        return order

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def find_by_product(self, product_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.product_id == product_id)
        ).scalar_one_or_none()

    def list_for_user(self, user_id: str) -> list[OrderModel]:
        stmt = (
            select(OrderModel)
            .where((OrderModel.buyer_id == user_id) | (OrderModel.seller_id == user_id))
            .order_by(OrderModel.order_date.desc())
        )
        return list(self.db.execute(stmt).scalars())
