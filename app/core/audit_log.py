"""
Audit logging for admin actions

Track every administrative mutation for security review:
- Records what was done, to which resource, and from where
- Logs to a dedicated "audit" logger as structured extra data
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Any

from app.core.config import settings

# Structured audit logger
audit_logger = logging.getLogger("audit")
audit_logger.setLevel(logging.INFO)

# Action categories
ACTION_ADMIN_LOGIN = "admin.login"
ACTION_ADMIN_LOGOUT = "admin.logout"
ACTION_PRODUCT_CREATE = "product.create"
ACTION_PRODUCT_UPDATE = "product.update"
ACTION_PRODUCT_TOGGLE = "product.toggle_status"
ACTION_PRODUCT_DELETE = "product.delete"
ACTION_STACK_CREATE = "stack.create"
ACTION_STACK_UPDATE = "stack.update"
ACTION_STACK_TOGGLE = "stack.toggle_status"
ACTION_STACK_DELETE = "stack.delete"
ACTION_STACK_REORDER = "stack.reorder"
ACTION_STACK_MEMBERS = "stack.members"
ACTION_CATEGORY_CREATE = "category.create"
ACTION_CATEGORY_UPDATE = "category.update"
ACTION_CATEGORY_TOGGLE = "category.toggle_status"
ACTION_CATEGORY_DELETE = "category.delete"
ACTION_CONFIG_UPDATE = "config.update"

_SENSITIVE_DETAIL_KEYS = ("password", "secret", "token", "key", "credential", "code")


def log_admin_action(
    action: str,
    resource_type: str,
    resource_id: Optional[Any] = None,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
    success: bool = True,
):
    """
    Log an administrative action.

    Args:
        action: Action identifier (e.g., "product.create")
        resource_type: Type of resource affected (e.g., "product", "stack")
        resource_id: ID of the affected resource (if applicable)
        details: Additional context about the action
        ip_address: IP address of the request
        success: Whether the action succeeded
    """
    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "resource_type": resource_type,
        "resource_id": str(resource_id) if resource_id else None,
        "success": success,
        "ip_address": ip_address,
        "environment": settings.ENVIRONMENT,
    }

    if details:
        safe_details = {
            k: v for k, v in details.items()
            if k.lower() not in _SENSITIVE_DETAIL_KEYS
        }
        log_entry["details"] = safe_details

    if success:
        audit_logger.info(
            f"AUDIT: {action} on {resource_type}/{resource_id}",
            extra={"audit": log_entry}
        )
    else:
        audit_logger.warning(
            f"AUDIT FAILED: {action} on {resource_type}/{resource_id}",
            extra={"audit": log_entry}
        )
