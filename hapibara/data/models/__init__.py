#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from hapibara.data.models.user import UserModel
from hapibara.data.models.product import ProductModel
from hapibara.data.models.cart_item import CartItemModel
from hapibara.data.models.order import OrderModel
from hapibara.data.models.order_item import OrderItemModel
from hapibara.data.models.kindness_activity import KindnessActivityModel

__all__ = [
    "UserModel",
    "ProductModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "KindnessActivityModel",
]
