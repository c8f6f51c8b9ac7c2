# Domain records are plain frozen dataclasses; only StateSnapshot
# (models/snapshot.py) is mapped to a table. It is imported separately so
# that extensions -> state -> models never needs the db instance.
from .inventory import Product, LOW_STOCK_THRESHOLD
from .auth import User, Role, BOOTSTRAP_USERNAME
from .shifts import ShiftRecord, ShiftType
from .sales import SaleRecord, SaleItem, Cart, CartLine

__all__ = [
    'Product', 'LOW_STOCK_THRESHOLD',
    'User', 'Role', 'BOOTSTRAP_USERNAME',
    'ShiftRecord', 'ShiftType',
    'SaleRecord', 'SaleItem', 'Cart', 'CartLine',
]
