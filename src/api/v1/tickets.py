# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Ticket API endpoints."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from src.api.deps import get_db, require_permission
from src.models.enums import TicketPriority, TicketStatus
from src.rbac.principal import Principal
from src.rbac.scope import TicketFilters
from src.schemas.common import PaginatedResponse, PaginationMeta
from src.schemas.ticket import TicketCreate, TicketResponse, TicketUpdate
from src.services import ticket_service

router = APIRouter()


def _get_visible_ticket(db: Session, principal: Principal, ticket_id: uuid.UUID):
    ticket = ticket_service.get_ticket(db, principal, ticket_id)
    if not ticket:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found",
        )
    return ticket


@router.get("", response_model=PaginatedResponse[TicketResponse])
def list_tickets(
    status_filter: TicketStatus | None = Query(None, alias="status"),
    priority: TicketPriority | None = None,
    customer_id: int | None = None,
    assignee_id: uuid.UUID | None = None,
    organization_id: uuid.UUID | None = None,
    department_id: uuid.UUID | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("tickets", "read")),
) -> PaginatedResponse[TicketResponse]:
    """List the tickets visible to the caller, newest first."""
    filters = TicketFilters(
        status=status_filter.value if status_filter else None,
        priority=priority.value if priority else None,
        customer_id=customer_id,
        assignee_id=assignee_id,
        organization_id=organization_id,
        department_id=department_id,
        page=page,
        limit=limit,
    )
    result = ticket_service.list_tickets(db, principal, filters)

    return PaginatedResponse[TicketResponse](
        data=[TicketResponse.model_validate(t) for t in result.items],
        meta=PaginationMeta(
            total=result.total,
            page=result.page,
            per_page=result.per_page,
            pages=result.pages,
            has_next=result.has_next,
            has_prev=result.has_prev,
        ),
    )


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(
    data: TicketCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("tickets", "create")),
) -> TicketResponse:
    """Create a ticket in the caller's organization/department or one it may use."""
    ticket = ticket_service.create_ticket(db, principal, data)
    return TicketResponse.model_validate(ticket)


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("tickets", "read")),
) -> TicketResponse:
    """Get a specific ticket."""
    return TicketResponse.model_validate(_get_visible_ticket(db, principal, ticket_id))


@router.put("/{ticket_id}", response_model=TicketResponse)
def update_ticket(
    ticket_id: uuid.UUID,
    data: TicketUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("tickets", "update")),
) -> TicketResponse:
    """Update a ticket."""
    ticket = _get_visible_ticket(db, principal, ticket_id)
    ticket = ticket_service.update_ticket(db, principal, ticket, data)
    return TicketResponse.model_validate(ticket)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ticket(
    ticket_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_permission("tickets", "delete")),
) -> Response:
    """Delete a ticket."""
    ticket = _get_visible_ticket(db, principal, ticket_id)
    ticket_service.delete_ticket(db, principal, ticket)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
