# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Ticket service: the data layer behind tenant-scoped ticket access."""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Session

from src.models import Department, Ticket
from src.models.enums import TicketPriority, TicketStatus
from src.rbac.exceptions import AuthorizationDenied
from src.rbac.principal import Principal
from src.rbac.scope import (
    DepartmentOnly,
    OrganizationWide,
    ScopePredicate,
    SelfOwned,
    TicketFilters,
    Unrestricted,
    build_scope,
    can_access_record,
    check_ticket_placement,
)
from src.schemas.ticket import TicketCreate, TicketUpdate

logger = logging.getLogger(__name__)

# Fields that an update may never touch
PROTECTED_FIELDS = {"id", "organization_id", "created_by_id", "created_at"}


class TicketServiceError(Exception):
    """Base exception for ticket service errors."""


class DepartmentNotFoundError(TicketServiceError):
    """Referenced department does not exist."""


@dataclass
class TicketPage:
    """One page of tickets plus the total count before pagination."""

    items: list[Ticket]
    total: int
    page: int
    per_page: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def scope_clause(predicate: ScopePredicate) -> sa.ColumnElement[bool]:
    """Translate a scope predicate into a WHERE clause on tickets."""
    if isinstance(predicate, Unrestricted):
        conditions = []
        if predicate.organization_id is not None:
            conditions.append(Ticket.organization_id == predicate.organization_id)
        if predicate.department_id is not None:
            conditions.append(Ticket.department_id == predicate.department_id)
        return sa.and_(sa.true(), *conditions)

    if isinstance(predicate, OrganizationWide):
        if predicate.is_empty:
            return sa.false()
        conditions = [Ticket.organization_id == predicate.organization_id]
        if predicate.department_id is not None:
            conditions.append(Ticket.department_id == predicate.department_id)
        return sa.and_(*conditions)

    if isinstance(predicate, DepartmentOnly):
        return Ticket.department_id == predicate.department_id

    if isinstance(predicate, SelfOwned):
        return sa.or_(
            Ticket.created_by_id == predicate.user_id,
            Ticket.assignee_id == predicate.user_id,
            Ticket.client_responsible_id == predicate.user_id,
        )

    # Unknown predicate: match nothing
    return sa.false()


def filter_clause(filters: TicketFilters) -> sa.ColumnElement[bool]:
    """Translate the attribute filters into a WHERE clause on tickets."""
    conditions = []
    if filters.status is not None:
        conditions.append(Ticket.status == TicketStatus(filters.status))
    if filters.priority is not None:
        conditions.append(Ticket.priority == TicketPriority(filters.priority))
    if filters.customer_id is not None:
        conditions.append(Ticket.customer_id == filters.customer_id)
    if filters.assignee_id is not None:
        conditions.append(Ticket.assignee_id == filters.assignee_id)
    if filters.ids is not None:
        conditions.append(Ticket.id.in_(filters.ids))
    return sa.and_(sa.true(), *conditions)


def list_tickets(
    db: Session, principal: Principal, filters: TicketFilters | None = None
) -> TicketPage:
    """List the tickets visible to a principal.

    The tier predicate and filters are applied first, then ordering by
    ``created_at`` descending, then pagination. ``total`` is counted after
    the predicate and before pagination.
    """
    filters = filters or TicketFilters()
    predicate = build_scope(principal, filters)
    where = sa.and_(scope_clause(predicate), filter_clause(filters))

    total = db.query(sa.func.count(Ticket.id)).filter(where).scalar() or 0
    items = (
        db.query(Ticket)
        .filter(where)
        .order_by(Ticket.created_at.desc(), Ticket.id)
        .offset(filters.offset)
        .limit(filters.limit)
        .all()
    )
    logger.debug(
        "Listed %d/%d tickets for %s at tier %s",
        len(items),
        total,
        principal.user_id,
        predicate.tier.value,
    )
    return TicketPage(items=items, total=total, page=filters.page, per_page=filters.limit)


def _get_department(db: Session, department_id: uuid.UUID) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if department is None:
        raise DepartmentNotFoundError("Department not found")
    return department


def get_ticket(db: Session, principal: Principal, ticket_id: uuid.UUID) -> Ticket | None:
    """Get a ticket if it exists and is visible to the principal."""
    ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
    if not ticket or not can_access_record(principal, ticket):
        return None
    return ticket


def create_ticket(db: Session, principal: Principal, data: TicketCreate) -> Ticket:
    """Create a ticket placed in an organization/department the principal may use."""
    organization_id, department_id = check_ticket_placement(
        principal, data.organization_id, data.department_id
    )

    if department_id is not None:
        department = _get_department(db, department_id)
        if organization_id is None:
            organization_id = department.organization_id
        elif department.organization_id != organization_id:
            raise AuthorizationDenied("Department belongs to a different organization")

    ticket = Ticket(
        **data.model_dump(exclude={"organization_id", "department_id"}),
        organization_id=organization_id,
        department_id=department_id,
        created_by_id=principal.user_id,
        status=TicketStatus.OPEN,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    logger.info("Ticket %s created by %s", ticket.id, principal.user_id)
    return ticket


def _check_department_move(
    db: Session, principal: Principal, ticket: Ticket, department_id: uuid.UUID | None
) -> None:
    """Make sure the principal may move ``ticket`` to ``department_id``."""
    if department_id == ticket.department_id:
        return

    if department_id is None:
        # Detaching a ticket takes it out of its department
        if not principal.can_cross_departments:
            raise AuthorizationDenied("Cannot move ticket out of its department")
        return

    check_ticket_placement(principal, ticket.organization_id, department_id)
    department = _get_department(db, department_id)
    if department.organization_id != ticket.organization_id:
        raise AuthorizationDenied("Department belongs to a different organization")


def update_ticket(
    db: Session, principal: Principal, ticket: Ticket, data: TicketUpdate
) -> Ticket:
    """Update a ticket the principal can see. Organization cannot be switched."""
    if not can_access_record(principal, ticket):
        raise AuthorizationDenied("Access denied to this ticket")

    update_data = data.model_dump(exclude_unset=True)
    for key in PROTECTED_FIELDS:
        update_data.pop(key, None)

    if "department_id" in update_data:
        _check_department_move(db, principal, ticket, update_data["department_id"])

    if (
        update_data.get("status") == TicketStatus.RESOLVED
        and ticket.status != TicketStatus.RESOLVED
    ):
        ticket.resolved_at = datetime.utcnow()

    for key, value in update_data.items():
        setattr(ticket, key, value)

    db.commit()
    db.refresh(ticket)
    return ticket


def delete_ticket(db: Session, principal: Principal, ticket: Ticket) -> None:
    """Delete a ticket the principal can see."""
    if not can_access_record(principal, ticket):
        raise AuthorizationDenied("Access denied to this ticket")
    ticket_id = ticket.id
    db.delete(ticket)
    db.commit()
    logger.info("Ticket %s deleted by %s", ticket_id, principal.user_id)
