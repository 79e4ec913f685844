#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from dawazon.data.models.user import UserModel
from dawazon.data.models.cart import CartModel
from dawazon.data.models.cart_line import CartLineModel

__all__ = ["UserModel", "CartModel", "CartLineModel"]
