# marketplace/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from marketplace.data.models.cart_entry import CartEntryModel
from marketplace.data.models.product import ProductModel, STATUS_AVAILABLE


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_entries(self, buyer_id: str) -> list[CartEntryModel]:
        stmt = (
            select(CartEntryModel)
            .where(CartEntryModel.buyer_id == buyer_id)
            .order_by(CartEntryModel.added_at.desc())
        )
        return list(self.db.execute(stmt).scalars())

    def put_entry(self, entry: CartEntryModel) -> CartEntryModel:
        #upsert keyed by (buyer_id, product_id)
        return self.db.merge(entry)

    def delete_entry(self, buyer_id: str, product_id: str) -> int:
        result = self.db.execute(
            delete(CartEntryModel).where(
                CartEntryModel.buyer_id == buyer_id,
                CartEntryModel.product_id == product_id,
            )
        )
        return result.rowcount

    def find_stale_entries(self) -> list[CartEntryModel]:
        stmt = (
            select(CartEntryModel)
            .outerjoin(ProductModel, ProductModel.id == CartEntryModel.product_id)
            .where(
                (ProductModel.id.is_(None)) | (ProductModel.status != STATUS_AVAILABLE)
            )
        )
        return list(self.db.execute(stmt).scalars())

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
