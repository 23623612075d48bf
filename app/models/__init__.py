from app.models.product import Product
from app.models.stack import Stack, StackProduct
from app.models.category import Category, ProductCategory
from app.models.site_settings import SiteSetting
from app.models.admin_session import AdminSession

__all__ = [
    "Product",
    "Stack",
    "StackProduct",
    "Category",
    "ProductCategory",
    "SiteSetting",
    "AdminSession",
]
