# marketplace/services/order_service.py
import uuid
from datetime import datetime, timezone

import redis
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel, ORDER_PENDING, ORDER_SHIPPED
from marketplace.data.models.product import STATUS_AVAILABLE
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.services.blob_store import BlobStore, slip_key
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

ALREADY_ORDERED = "This product has been ordered."
NOT_AVAILABLE = "This product is no longer available."
CHECKOUT_IN_PROGRESS = "This product is being purchased by another buyer."
MISSING_SLIP = "Please select your payment slip before proceeding."
MISSING_TRACKING = "Please enter a tracking number before saving."


class CheckoutUnavailable(Exception):
    """The checkout lock store cannot be reached."""


class OrderService:
    """
    Order lifecycle: checkout pre-check, placement, tracking.

    Placement writes the order, the seller notification, the product status
    and the cart removal in one transaction. Tracking writes the order and
    every notification of that order in one transaction.
    """

    def __init__(self, db: Session, lock_service: LockService, blob_store: BlobStore):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.cart = CartRepo(db)
        self.users = UserRepo(db)
        self.notifications = NotificationService(db)
        self.lock_service = lock_service
        self.blob_store = blob_store

    # =====================================================
    # QUERY
    # =====================================================
    def is_ordered(self, product_id: str) -> bool:
        return self.repo.find_by_product(product_id) is not None

    def checkout_summary(self, product_id: str, buyer_id: str):
        """
        Everything the checkout screen shows, and the duplicate-order check
        that runs right before it.
        """
        buyer = self.users.get_user(buyer_id)
        if not buyer:
            raise LookupError("User not found")

        product = self.products.get_product(product_id)
        if not product:
            raise LookupError("Product not found")

        if self.is_ordered(product_id):
            raise RuntimeError(ALREADY_ORDERED)

        if product.status != STATUS_AVAILABLE:
            raise RuntimeError(NOT_AVAILABLE)

        seller = self.users.get_user(product.seller_id)

        return {
            "product": product,
            "shop_name": product.seller_name,
            "promptpay_qr_url": seller.promptpay_qr_url if seller else None,
            "buyer_name": buyer.username,
            "buyer_address": buyer.address,
            "buyer_phone": buyer.phone,
        }

    def get_order(self, order_id: str, user_id: str) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise LookupError("Order not found")

        if user_id not in (order.buyer_id, order.seller_id):
            raise PermissionError("No access to this order")

        return order

    def list_orders(self, user_id: str) -> list[OrderModel]:
        return self.repo.list_for_user(user_id)

    # =====================================================
    # COMMANDS
    # =====================================================
    def place_order(
        self,
        buyer_id: str,
        product_id: str,
        slip: bytes,
        address: str | None = None,
        phone: str | None = None,
    ) -> OrderModel:
        """
        Use case: buyer pays for a listing.

        1. validate everything before touching storage
        2. take the checkout lock for the product
        3. upload the payment slip (failure stops here, nothing written)
        4. commit order + seller notification + product sold + cart removal
        5. push the notification to the seller
        """
        if not slip:
            raise ValueError(MISSING_SLIP)

        buyer = self.users.get_user(buyer_id)
        if not buyer:
            raise LookupError("User not found")

        product = self.products.get_product(product_id)
        if not product:
            raise LookupError("Product not found")

        if product.seller_id == buyer_id:
            raise ValueError("You cannot buy your own product")

        address = (address if address is not None else buyer.address).strip()
        phone = (phone if phone is not None else buyer.phone).strip()
        if not address or not phone:
            raise ValueError("Shipping address and phone number are required")

        if self.is_ordered(product_id):
            raise RuntimeError(ALREADY_ORDERED)

        if product.status != STATUS_AVAILABLE:
            raise RuntimeError(NOT_AVAILABLE)

        owner = f"{buyer_id}:{uuid.uuid4().hex}"
        try:
            acquired = self.lock_service.acquire_checkout_lock(product_id, owner, CHECKOUT_LOCK_TTL_SECONDS)
        except redis.RedisError as e:
            logger.error(f"Checkout lock for product {product_id} unavailable: {e}")
            raise CheckoutUnavailable(f"Checkout unavailable: {e}") from e

        if not acquired:
            logger.warning(f"Checkout of product {product_id} already in progress, rejecting {buyer_id}")
            raise RuntimeError(CHECKOUT_IN_PROGRESS)

        try:
            order = self._place_locked(buyer, product, slip, address, phone)
        finally:
            self._release(product_id, owner)

        return order

    def _release(self, product_id: str, owner: str):
        #the lock expires after its ttl, a failed release must not undo a committed order
        try:
            self.lock_service.release_checkout_lock(product_id, owner)
        except redis.RedisError as e:
            logger.warning(f"Checkout lock for product {product_id} not released, left to expire: {e}")

    def _place_locked(self, buyer, product, slip: bytes, address: str, phone: str) -> OrderModel:
        key = slip_key(buyer.id)
        try:
            slip_url = self.blob_store.put(key, slip)
        except OSError as e:
            logger.error(f"Slip upload for product {product.id} failed: {e}")
            raise OSError(f"Upload failed: {e}") from e

        now = datetime.now(timezone.utc)

        order = OrderModel(
            id=uuid.uuid4().hex,
            product_id=product.id,
            product_name=product.name,
            product_price=product.price,
            product_image_url=product.image_url,
            buyer_id=buyer.id,
            buyer_name=buyer.username,
            buyer_address=address,
            buyer_phone=phone,
            seller_id=product.seller_id,
            shop_name=product.seller_name,
            payment_slip_url=slip_url,
            tracking_number=None,
            status=ORDER_PENDING,
            order_date=now,
        )

        try:
            self.repo.add(order)
            notification = self.notifications.build_order_notification(order)

            if self.products.mark_sold(product.id, buyer.id, now) == 0:
                raise RuntimeError(NOT_AVAILABLE)

            self.cart.delete_entry(buyer.id, product.id)

            self.db.commit()

        except IntegrityError as e:
            self._abort(key, f"duplicate order for product {product.id}: {e}")
            raise RuntimeError(ALREADY_ORDERED) from e
        except RuntimeError as e:
            self._abort(key, f"product {product.id} changed during checkout: {e}")
            raise
        except Exception as e:
            self._abort(key, f"commit of order for product {product.id} failed: {e}")
            raise

        logger.info(f"Order {order.id} placed by {buyer.id} for product {product.id}")

        self._push(notification, order.seller_id)
        return order

    def _abort(self, key: str, reason: str):
        self.db.rollback()
        logger.error(f"Order aborted, {reason}")

        #slip is useless without the order
        try:
            self.blob_store.delete(key)
        except OSError as e:
            logger.warning(f"Could not delete orphaned slip {key}: {e}")

    def update_tracking(self, order_id: str, seller_id: str, tracking_number: str):
        """
        Use case: seller ships the package.

        Order gets the tracking number and status Shipped, every notification
        of the order becomes an unread "delivery" notification for the buyer.
        One commit for all of it.
        """
        tracking_number = (tracking_number or "").strip()
        if not tracking_number:
            raise ValueError(MISSING_TRACKING)

        order = self.repo.get_order(order_id)

        if not order:
            raise LookupError("Order not found")

        if order.seller_id != seller_id:
            raise PermissionError("Only the seller can update tracking for this order")

        now = datetime.now(timezone.utc)

        order.tracking_number = tracking_number
        order.status = ORDER_SHIPPED
        order.last_updated = now

        notifications = self.notifications.apply_tracking(order_id, tracking_number, now)

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to save tracking for order {order_id}: {e}")
            raise

        logger.info(
            f"Order {order_id} shipped with tracking {tracking_number}, "
            f"{len(notifications)} notification(s) updated"
        )

        for n in notifications:
            self._push(n, n.buyer_id)

        return {"order": order, "notifications_updated": len(notifications)}

    def _push(self, notification, recipient_id: str):
        #the write is already committed, a broker outage must not fail the request
        try:
            NotificationService.send_push(notification, recipient_id)
        except Exception as e:
            logger.warning(f"Push for notification {notification.id} not queued: {e}")
