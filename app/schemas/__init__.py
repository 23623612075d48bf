from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse, ProductList
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse, CategorySummary
from app.schemas.stack import (
    StackCreate,
    StackUpdate,
    StackResponse,
    StackMemberIn,
    StackMemberAdd,
    StackMemberMove,
    StackMemberResponse,
    StackReorderRequest,
)
from app.schemas.admin import (
    AdminLoginRequest,
    AdminLoginResponse,
    AdminSessionStatus,
    MaintenanceModeRequest,
    SiteConfigResponse,
    SettingUpdateRequest,
    SettingResponse,
)
