from app.core.config import settings
from app.core.database import get_db, Base, get_db_session
from app.core.exceptions import (
    CatalogError,
    NotFoundError,
    CatalogValidationError,
    StorageBackendError,
    ExternalServiceError,
)
