"""Administrative bulk operations."""

from networth.admin.bulk import CREATE_ORDER, DELETE_ORDER, BulkLifecycle

__all__ = ["BulkLifecycle", "CREATE_ORDER", "DELETE_ORDER"]
