# marketplace/services/notification_service.py
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.celery_worker import celery_app
from marketplace.data.models.notification import NotificationModel, TYPE_ORDER, TYPE_DELIVERY
from marketplace.data.models.order import OrderModel
from marketplace.repos.notification_repo import NotificationRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_TITLE = "New Order Received"
DELIVERY_TITLE = "Your package has been shipped."


class NotificationService:
    """
    Notification records read by both sides of an order.

    The seller gets an "order" notification when the order is placed. When the
    seller enters a tracking number the same records are rewritten in place
    into "delivery" notifications for the buyer.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepo(db)
        self.orders = OrderRepo(db)

    # fan-out, no commit here: the caller owns the transaction

    def build_order_notification(self, order: OrderModel) -> NotificationModel:
        notification = NotificationModel(
            type=TYPE_ORDER,
            title=ORDER_TITLE,
            message=f"{order.buyer_name} placed an order for {order.product_name}",
            seller_id=order.seller_id,
            buyer_id=order.buyer_id,
            order_id=order.id,
            product_id=order.product_id,
            is_read=False,
            timestamp=order.order_date,
        )
        return self.repo.add(notification)

    def apply_tracking(self, order_id: str, tracking_number: str, when: datetime) -> list[NotificationModel]:
        notifications = self.repo.find_by_order(order_id)

        for n in notifications:
            n.tracking_number = tracking_number
            n.title = DELIVERY_TITLE
            n.message = f"Tracking number: {tracking_number}"
            n.type = TYPE_DELIVERY
            n.is_read = False
            n.last_updated = when

        if not notifications:
            logger.warning(f"Order {order_id} has no notifications, buyer will not be told about tracking")

        return notifications

    # queries

    def list_for_user(self, user_id: str) -> list[NotificationModel]:
        return self.repo.list_feed(user_id)

    def get_for_user(self, notification_id: str, user_id: str) -> NotificationModel:
        notification = self.repo.get_notification(notification_id)

        if not notification:
            raise LookupError("Notification not found")

        if user_id not in (notification.seller_id, notification.buyer_id):
            raise PermissionError("No access to this notification")

        return notification

    def get_detail(self, notification_id: str, user_id: str) -> dict:
        notification = self.get_for_user(notification_id, user_id)
        return {
            "notification": notification,
            "order": self.orders.get_order(notification.order_id),
        }

    # commands

    def mark_read(self, notification_id: str, user_id: str) -> NotificationModel:
        notification = self.get_for_user(notification_id, user_id)

        if notification.is_read:
            return notification

        notification.is_read = True
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to mark notification {notification_id} as read: {e}")
            raise

        logger.info(f"Notification {notification_id} marked as read by {user_id}")
        return notification

    # push, after commit only

    @staticmethod
    def send_push(notification: NotificationModel, recipient_id: str):
        send_push_notification_task.delay(
            notification.id,
            recipient_id,
            notification.title,
            notification.message,
        )


@celery_app.task(name="marketplace.services.notification_service.send_push_notification_task")
def send_push_notification_task(notification_id: str, recipient_id: str, title: str, message: str):
    """
    Delivers a push for a stored notification. The push gateway sits outside
    this service, so delivery is the log line.
    """
    logger.info(f"[PUSH] to {recipient_id}: {title} - {message} (notification {notification_id})")
    return {"notification_id": notification_id, "recipient_id": recipient_id, "status": "sent"}
