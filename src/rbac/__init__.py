"""Role-based access control and tenant scoping."""
