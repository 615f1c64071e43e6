"""Integration tests for the import and record listing endpoints."""

import io

import pytest
from httpx import AsyncClient

from impactcrm.config import get_settings
from impactcrm.models import ClosedClientFile, DonorTrackerEntry
from impactcrm.services.record_store import InMemoryRecordStore, get_record_store

pytestmark = pytest.mark.mongo


def _upload(content: str | bytes, filename: str = "upload.csv") -> dict:
    if isinstance(content, str):
        content = content.encode("utf-8")
    return {"file": (filename, io.BytesIO(content), "text/csv")}


# =============================================================================
# Accepted imports
# =============================================================================


@pytest.mark.asyncio
async def test_import_client_files(client: AsyncClient, organization) -> None:
    csv_data = "Client Name,Age,Year\nJane Doe,34,2023\nAdam Smith,51,2023\n"

    response = await client.post("/api/import/client_files", files=_upload(csv_data))

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "accepted"
    assert data["inserted"] == 2
    assert data["year"] == 2023
    assert data["errors"] == []

    docs = await ClosedClientFile.find_all().to_list()
    assert len(docs) == 2
    assert {doc.organization_id for doc in docs} == {str(organization.id)}
    assert all(doc.user_id is None for doc in docs)


@pytest.mark.asyncio
async def test_import_records_creator(client: AsyncClient) -> None:
    response = await client.post(
        "/api/import/donor_tracker",
        files=_upload('donor_name,value,date_due\nAcme Fund,"$12,000",6/30/2025\n'),
    )
    assert response.status_code == 200

    [doc] = await DonorTrackerEntry.find_all().to_list()
    assert doc.donor_name == "Acme Fund"
    assert doc.value == 12000
    assert doc.date_due == "2025-06-30"
    assert doc.user_id == "user-member"


@pytest.mark.asyncio
async def test_import_year_form_field(client: AsyncClient) -> None:
    response = await client.post(
        "/api/import/client_files",
        files=_upload("Client Name\nJane Doe\n"),
        data={"year": "2024"},
    )
    assert response.status_code == 200
    [doc] = await ClosedClientFile.find_all().to_list()
    assert doc.year == 2024


@pytest.mark.asyncio
async def test_import_year_from_filename(client: AsyncClient) -> None:
    response = await client.post(
        "/api/import/client_files",
        files=_upload("Client Name\nJane Doe\n", filename="closed_client_files_FY2022.csv"),
    )
    assert response.status_code == 200
    assert response.json()["year"] == 2022


@pytest.mark.asyncio
async def test_import_only_blank_rows(client: AsyncClient) -> None:
    response = await client.post("/api/import/networking", files=_upload("name,email\n,\n"))
    assert response.status_code == 200
    assert response.json()["status"] == "empty"
    assert response.json()["inserted"] == 0


# =============================================================================
# Blocked imports
# =============================================================================


@pytest.mark.asyncio
async def test_blocked_import_writes_nothing(client: AsyncClient) -> None:
    csv_data = "Client Name,Age,Year\nJane Doe,34,2023\n,40,2023\n"

    response = await client.post("/api/import/client_files", files=_upload(csv_data))

    assert response.status_code == 422
    data = response.json()
    assert data["status"] == "blocked"
    assert data["errors"] == ["Row 3: Client Name is required"]
    assert data["error_count"] == 1
    assert await ClosedClientFile.find_all().count() == 0


@pytest.mark.asyncio
async def test_blocked_import_caps_displayed_errors(client: AsyncClient) -> None:
    csv_data = "donor_name,value\n" + "Acme,lots\n" * 75

    response = await client.post("/api/import/donor_tracker", files=_upload(csv_data))

    assert response.status_code == 422
    data = response.json()
    assert data["error_count"] == 75
    assert len(data["errors"]) == 50
    assert data["hidden_error_count"] == 25


@pytest.mark.asyncio
async def test_missing_required_header(client: AsyncClient) -> None:
    response = await client.post("/api/import/disbursed_awards", files=_upload("Amount\n100\n"))
    assert response.status_code == 422
    assert response.json()["errors"] == ["Missing required header: Donor Name"]


@pytest.mark.asyncio
async def test_unknown_record_type(client: AsyncClient) -> None:
    response = await client.post("/api/import/grants", files=_upload("name\nx\n"))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_rejects_non_csv_upload(client: AsyncClient) -> None:
    response = await client.post(
        "/api/import/donor_tracker", files=_upload("donor_name\nAcme\n", filename="donors.xlsx")
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_rejects_oversized_upload(client: AsyncClient, monkeypatch) -> None:
    monkeypatch.setattr(get_settings().config.storage, "max_upload_mb", 0)
    response = await client.post("/api/import/donor_tracker", files=_upload("donor_name\nAcme\n"))
    assert response.status_code == 413


@pytest.mark.asyncio
async def test_store_failure_returns_502(client: AsyncClient, app) -> None:
    failing = InMemoryRecordStore()
    failing.fail_with = RuntimeError("primary stepped down")
    app.dependency_overrides[get_record_store] = lambda: failing

    response = await client.post("/api/import/donor_tracker", files=_upload("donor_name\nAcme\n"))

    assert response.status_code == 502
    assert "primary stepped down" not in response.text


# =============================================================================
# Access control
# =============================================================================


@pytest.mark.asyncio
async def test_requires_token(unauthenticated_client: AsyncClient) -> None:
    response = await unauthenticated_client.post(
        "/api/import/donor_tracker", files=_upload("donor_name\nAcme\n")
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_rejects_invalid_token(unauthenticated_client: AsyncClient) -> None:
    response = await unauthenticated_client.get(
        "/api/records/donor_tracker", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_requires_membership(outsider_client: AsyncClient) -> None:
    response = await outsider_client.get("/api/records/donor_tracker")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_viewer_can_read_but_not_import(viewer_client: AsyncClient) -> None:
    response = await viewer_client.post(
        "/api/import/donor_tracker", files=_upload("donor_name\nAcme\n")
    )
    assert response.status_code == 403

    response = await viewer_client.get("/api/records/donor_tracker")
    assert response.status_code == 200


# =============================================================================
# Listing
# =============================================================================


@pytest.mark.asyncio
async def test_list_records_is_tenant_scoped(client: AsyncClient, other_organization) -> None:
    await ClosedClientFile(
        client_name="Hidden", year=2023, organization_id=str(other_organization.id)
    ).insert()
    await client.post(
        "/api/import/client_files",
        files=_upload("Client Name,Year\nZoe,2023\nAdam,2023\nMia,2024\n"),
    )

    response = await client.get("/api/records/client_files")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert [r["client_name"] for r in data["records"]] == ["Adam", "Mia", "Zoe"]

    response = await client.get("/api/records/client_files", params={"year": 2023})
    assert [r["client_name"] for r in response.json()["records"]] == ["Adam", "Zoe"]


@pytest.mark.asyncio
async def test_year_filter_on_unpartitioned_type(client: AsyncClient) -> None:
    response = await client.get("/api/records/networking", params={"year": 2023})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_record_types(client: AsyncClient) -> None:
    response = await client.get("/api/records/types")
    assert response.status_code == 200
    types = {t["record_type"]: t for t in response.json()}
    assert set(types) == {"client_files", "donor_tracker", "networking", "disbursed_awards"}
    assert types["client_files"]["partitioned_by_year"] is True
    assert types["disbursed_awards"]["required"] == ["Donor Name"]


@pytest.mark.asyncio
async def test_health(unauthenticated_client: AsyncClient) -> None:
    response = await unauthenticated_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
