# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Failure signals raised by the access-control core.

The HTTP layer maps them to status codes; the core never builds responses.
"""


class AccessControlError(Exception):
    """Base exception for access-control failures."""


class Unauthenticated(AccessControlError):
    """No valid session or identity could be resolved."""


class AuthorizationDenied(AccessControlError):
    """The principal lacks the permission or scope for the action."""


class InternalLookupError(AccessControlError):
    """The identity, role or permission store could not be read."""
