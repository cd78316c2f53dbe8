from product_api.models.product import Product
from product_api.models.session import UserSession
from product_api.models.user import User

__all__ = ["Product", "User", "UserSession"]
