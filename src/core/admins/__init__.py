"""Admin registry with a protected, non-removable principal."""

from src.core.admins.registry import AdminRegistry

__all__ = ["AdminRegistry"]
