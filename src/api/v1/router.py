# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Main API router for v1 endpoints."""

from fastapi import APIRouter

from src.api.v1 import auth, rbac, tenants, tickets

api_router = APIRouter()

# Auth routes
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# Ticket routes
api_router.include_router(tickets.router, prefix="/tickets", tags=["tickets"])

# Organization and department routes
api_router.include_router(tenants.router, tags=["tenants"])

# RBAC routes
api_router.include_router(rbac.router, tags=["rbac"])
