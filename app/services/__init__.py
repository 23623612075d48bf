# Services layer: catalog data access
from app.services.product_service import ProductService, ProductFilter
from app.services.stack_service import StackService, StackListing
from app.services.category_service import CategoryService
from app.services.site_settings import SiteSettingsService
from app.services.admin_session_service import AdminSessionService
from app.services.storage import StorageService, get_storage_service
