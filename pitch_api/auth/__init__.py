"""User accounts and JWT authentication."""
