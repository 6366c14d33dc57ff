#import all models so SQLAlchemy registers them in Base.metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.cart_entry import CartEntryModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.notification import NotificationModel

__all__ = ["UserModel", "ProductModel", "CartEntryModel", "OrderModel", "NotificationModel"]
