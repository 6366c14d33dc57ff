from sqlalchemy import select, or_, and_
from sqlalchemy.orm import Session

from marketplace.data.models.notification import NotificationModel, TYPE_ORDER, TYPE_DELIVERY


class NotificationRepo:
    def __init__(self, db: Session):
        self.db = db

    def add(self, notification: NotificationModel) -> NotificationModel:
        self.db.add(notification)
        return notification

    def get_notification(self, notification_id: str) -> NotificationModel | None:
        return self.db.get(NotificationModel, notification_id)

    def find_by_order(self, order_id: str) -> list[NotificationModel]:
        return list(
            self.db.execute(
                select(NotificationModel).where(NotificationModel.order_id == order_id)
            ).scalars()
        )

    def list_feed(self, user_id: str) -> list[NotificationModel]:
        #sellers read "order" notifications, buyers read "delivery" ones
        stmt = (
            select(NotificationModel)
            .where(
                or_(
                    and_(NotificationModel.seller_id == user_id, NotificationModel.type == TYPE_ORDER),
                    and_(NotificationModel.buyer_id == user_id, NotificationModel.type == TYPE_DELIVERY),
                )
            )
            .order_by(NotificationModel.timestamp.desc())
        )
        return list(self.db.execute(stmt).scalars())
