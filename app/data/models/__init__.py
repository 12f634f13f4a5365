#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata
from app.data.models.product import ProductModel
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel, OrderItemModel

__all__ = ["ProductModel", "CartModel", "CartItemModel", "OrderModel", "OrderItemModel"]
