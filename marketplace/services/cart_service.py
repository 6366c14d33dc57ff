from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from marketplace.data.models.cart_entry import CartEntryModel
from marketplace.data.models.product import STATUS_AVAILABLE
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Per-buyer cart, a keyed set of product snapshots.
    commands (add, remove) change state, query (get) only reads
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    #query
    def get_cart(self, buyer_id: str) -> Dict[str, Any]:
        if not self.users.get_user(buyer_id):
            raise LookupError("User not found")

        items = self.repo.get_entries(buyer_id)
        total = sum((i.price for i in items), Decimal("0.00"))

        return {
            "buyer_id": buyer_id,
            "items": items,
            "total": total,
        }

    #commands
    def add_product(self, buyer_id: str, product_id: str) -> Dict[str, Any]:
        if not self.users.get_user(buyer_id):
            raise LookupError("User not found")

        product = self.products.get_product(product_id)
        if not product:
            raise LookupError("Product not found")

        if product.seller_id == buyer_id:
            raise ValueError("You cannot add your own product to the cart")

        if product.status != STATUS_AVAILABLE:
            raise RuntimeError("This product is no longer available")

        #adding the same product again overwrites the snapshot
        self.repo.put_entry(
            CartEntryModel(
                buyer_id=buyer_id,
                product_id=product.id,
                name=product.name,
                price=product.price,
                detail=product.detail,
                image_url=product.image_url,
                seller_id=product.seller_id,
                seller_name=product.seller_name,
                status=product.status,
                added_at=datetime.now(timezone.utc),
            )
        )
        self.repo.commit()

        logger.info(f"Product {product_id} added to cart of {buyer_id}")
        return self.get_cart(buyer_id)

    def remove_product(self, buyer_id: str, product_id: str) -> Dict[str, Any]:
        removed = self.repo.delete_entry(buyer_id, product_id)

        if removed == 0:
            self.repo.rollback()
            raise LookupError("Product is not in the cart")

        self.repo.commit()

        logger.info(f"Product {product_id} removed from cart of {buyer_id}")
        return self.get_cart(buyer_id)
