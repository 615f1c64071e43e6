"""ImpactCRM - nonprofit CRM service with tenant-scoped CSV import."""

__version__ = "0.3.0"
