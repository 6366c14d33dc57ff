# marketplace/repos/product_repo.py
from datetime import datetime

from sqlalchemy import select, update, delete, or_, and_
from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel, STATUS_AVAILABLE, STATUS_SOLD
from marketplace.data.models.user import UserModel, ROLE_SELLER
from marketplace.data.models.cart_entry import CartEntryModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_by_seller(self, seller_id: str, status: str | None = None) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.seller_id == seller_id)
        if status:
            stmt = stmt.where(ProductModel.status == status)
        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
        return list(self.db.execute(stmt).scalars())

    def list_available(
        self,
        limit: int,
        after: tuple[datetime, str] | None = None,
        search: str | None = None,
    ) -> list[ProductModel]:
        #one aggregated query over every seller
        stmt = (
            select(ProductModel)
            .join(UserModel, UserModel.id == ProductModel.seller_id)
            .where(
                ProductModel.status == STATUS_AVAILABLE,
                UserModel.role == ROLE_SELLER,
            )
        )

        if search:
            stmt = stmt.where(ProductModel.name.ilike(f"%{search}%"))

        if after is not None:
            after_created_at, after_id = after
            #keyset: (created_at, id) strictly after the cursor row
            stmt = stmt.where(
                or_(
                    ProductModel.created_at < after_created_at,
                    and_(
                        ProductModel.created_at == after_created_at,
                        ProductModel.id < after_id,
                    ),
                )
            )

        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars())

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        return product

    def mark_sold(self, product_id: str, buyer_id: str, sold_at: datetime) -> int:
        #conditional on status, zero rows means someone else sold it first
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.status == STATUS_AVAILABLE,
            )
            .values(status=STATUS_SOLD, buyer_id=buyer_id, sold_date=sold_at)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_product(self, product: ProductModel) -> None:
        self.db.execute(delete(CartEntryModel).where(CartEntryModel.product_id == product.id))
        self.db.delete(product)

    def commit(self):
        self.db.commit()
