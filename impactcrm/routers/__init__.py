"""API routers for ImpactCRM."""

from impactcrm.routers import dashboard, export, import_router, records

__all__ = ["dashboard", "export", "import_router", "records"]
