from marketplace.models.user import User
from marketplace.models.salon import Salon
from marketplace.models.product import Product
from marketplace.models.cart import CartItem
from marketplace.models.order import Order
from marketplace.models.order_item import OrderItem
from marketplace.models.order_event import OrderEvent

# add ALL models here
