"""Services package."""
from src.services import (
    auth_service,
    principal_service,
    rbac_service,
    tenant_service,
    ticket_service,
)

__all__ = [
    "auth_service",
    "principal_service",
    "rbac_service",
    "tenant_service",
    "ticket_service",
]
