"""Dashboard summary endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from impactcrm.exceptions import RecordStoreError
from impactcrm.routers.records import StoreDep
from impactcrm.schemas.dashboard import ClientFileStats, TableSummary
from impactcrm.services import dashboard
from impactcrm.services.auth import RequireTenant

router = APIRouter()


@router.get("/client_files", response_model=ClientFileStats)
async def client_file_stats(
    tenant: RequireTenant,
    store: StoreDep,
    year: int | None = Query(default=None, description="Reporting year filter"),
) -> ClientFileStats:
    """Demographic summary of closed client files."""
    try:
        return await dashboard.client_file_dashboard(store, tenant, year)
    except RecordStoreError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Dashboard data could not be loaded",
        ) from None


@router.get("/summary", response_model=TableSummary)
async def summary(tenant: RequireTenant, store: StoreDep) -> TableSummary:
    """Record counts per table for the caller's organization."""
    try:
        return await dashboard.table_summary(store, tenant)
    except RecordStoreError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Dashboard data could not be loaded",
        ) from None
