"""Pydantic schemas package."""
from src.schemas.auth import AuthResponse, LoginRequest, PrincipalResponse
from src.schemas.common import MessageResponse, PaginatedResponse, PaginationMeta
from src.schemas.tenant import (
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
    DepartmentUserAssignment,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from src.schemas.ticket import TicketCreate, TicketResponse, TicketUpdate

__all__ = [
    "AuthResponse",
    "DepartmentCreate",
    "DepartmentResponse",
    "DepartmentUpdate",
    "DepartmentUserAssignment",
    "LoginRequest",
    "MessageResponse",
    "OrganizationCreate",
    "OrganizationResponse",
    "OrganizationUpdate",
    "PaginatedResponse",
    "PaginationMeta",
    "PrincipalResponse",
    "TicketCreate",
    "TicketResponse",
    "TicketUpdate",
]
