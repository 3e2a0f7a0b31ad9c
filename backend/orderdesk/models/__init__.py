from .soft_delete import Active, Deleted, DeletionState, SoftDeleteMixin
from .auth import User, Token, TOKEN_TYPES
from .catalog import Image, Category, Product, image_product, category_product
from .orders import Order, OrderItem, DEFAULT_ORDER_STATUS
from .promotions import Coupon, Discount

__all__ = [
    'Active', 'Deleted', 'DeletionState', 'SoftDeleteMixin',
    'User', 'Token', 'TOKEN_TYPES',
    'Image', 'Category', 'Product', 'image_product', 'category_product',
    'Order', 'OrderItem', 'DEFAULT_ORDER_STATUS',
    'Coupon', 'Discount',
]
