from .user import User
from .session import UserSession
from .beverage import Beverage, compute_stock_status
from .order import Order
from .inventory import InventoryTransaction
from .rating import Rating
from .favorite import Favorite

__all__ = [
    'User', 'UserSession',
    'Beverage', 'compute_stock_status',
    'Order', 'InventoryTransaction',
    'Rating', 'Favorite',
]
