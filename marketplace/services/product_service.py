# marketplace/services/product_service.py
import base64
from datetime import datetime

from sqlalchemy.orm import Session

from marketplace.data.models.product import ProductModel, STATUS_AVAILABLE, STATUS_SOLD
from marketplace.data.models.user import ROLE_SELLER
from marketplace.domain.schemas import ProductCreate, ProductUpdate
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.settings import CATALOG_PAGE_SIZE
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


class ProductService:
    """
    Listings: the buyer catalog (query) and seller create/edit/delete (commands).
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)
        self.orders = OrderRepo(db)

    #query - catalog
    def list_available(self, limit: int | None = None, cursor: str | None = None, search: str | None = None):
        limit = min(limit or CATALOG_PAGE_SIZE, MAX_PAGE_SIZE)

        after = decode_cursor(cursor) if cursor else None

        #one extra row tells us whether there is a next page
        rows = self.repo.list_available(limit + 1, after=after, search=search)
        items = rows[:limit]
        next_cursor = encode_cursor(items[-1]) if len(rows) > limit else None

        return {"items": items, "next_cursor": next_cursor}

    def list_for_seller(self, seller_id: str, status: str | None = None) -> list[ProductModel]:
        seller = self.users.get_user(seller_id)
        if not seller or seller.role != ROLE_SELLER:
            raise LookupError("Seller not found")
        return self.repo.list_by_seller(seller_id, status)

    def get_product(self, product_id: str) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise LookupError("Product not found")
        return product

    #commands
    def create_product(self, seller_id: str, payload: ProductCreate) -> ProductModel:
        seller = self.users.get_user(seller_id)

        if not seller:
            raise LookupError("User not found")

        if seller.role != ROLE_SELLER:
            raise PermissionError("Only sellers can post products")

        product = ProductModel(
            seller_id=seller.id,
            seller_name=seller.username,
            name=payload.name,
            price=payload.price,
            detail=payload.detail,
            image_url=payload.image_url,
            status=payload.status or STATUS_AVAILABLE,
        )
        self.repo.add(product)
        self.repo.commit()

        logger.info(f"Seller {seller_id} posted product {product.id}")
        return product

    def _owned(self, product_id: str, seller_id: str) -> ProductModel:
        product = self.get_product(product_id)
        if product.seller_id != seller_id:
            raise PermissionError("No access to this product")
        return product

    def update_product(self, product_id: str, seller_id: str, payload: ProductUpdate) -> ProductModel:
        product = self._owned(product_id, seller_id)

        changes = payload.model_dump(exclude_unset=True)
        for field in ("name", "price", "status"):
            if field in changes and changes[field] is None:
                raise ValueError(f"Product {field} cannot be empty")
        if "detail" in changes and changes["detail"] is None:
            changes["detail"] = ""

        if "status" in changes and changes["status"] != product.status:
            #an ordered listing stays sold
            if product.status == STATUS_SOLD or self.orders.find_by_product(product_id):
                raise RuntimeError("This product has been ordered.")

        for field, value in changes.items():
            setattr(product, field, value)

        self.repo.commit()
        logger.info(f"Product {product_id} updated: {sorted(changes)}")
        return product

    def delete_product(self, product_id: str, seller_id: str) -> None:
        product = self._owned(product_id, seller_id)

        self.repo.delete_product(product)
        self.repo.commit()

        logger.info(f"Product {product_id} deleted by seller {seller_id}")


# catalog cursor: position of the last row of a page, (created_at, id)

def encode_cursor(product: ProductModel) -> str:
    raw = f"{product.created_at.isoformat()}|{product.id}"
    return base64.urlsafe_b64encode(raw.encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        created_at, sep, product_id = raw.partition("|")
        if not sep or not product_id:
            raise ValueError(raw)
        return datetime.fromisoformat(created_at), product_id
    except ValueError:
        raise ValueError("Invalid cursor") from None
