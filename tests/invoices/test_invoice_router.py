"""HTTP tests for /invoices with the service layer patched out."""

from unittest.mock import Mock

import pytest
from fastapi import HTTPException

import invoices.service as invoice_service
from tests.conftest import TEST_USER_ID


@pytest.fixture
def stored(monkeypatch, make_invoice):
    """Patch list/get so the router sees a fixed collection."""
    invoices = [
        make_invoice(id=1, invoice_number="INV-000001", status="Paid"),
        make_invoice(id=2, invoice_number="INV-000002", status="Sent"),
        make_invoice(id=3, invoice_number="INV-000003", status="Draft"),
    ]
    by_id = {inv.id: inv for inv in invoices}

    def get_invoice(user_id, invoice_id):
        if invoice_id not in by_id:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return by_id[invoice_id]

    fetch = Mock(return_value=invoices)
    monkeypatch.setattr(invoice_service, "get_all_invoices", fetch)
    monkeypatch.setattr(invoice_service, "get_invoice_by_id", get_invoice)
    return fetch


class TestCreate:

    def test_create_returns_recomputed_total(self, client, monkeypatch, make_invoice):
        def create(user_id, invoice):
            return make_invoice(id=11, items=[item.model_dump() for item in invoice.items])

        monkeypatch.setattr(invoice_service, "create_invoice", create)

        response = client.post("/invoices/", json={
            "invoice_number": "INV-000011",
            "customer_details": {"name": "Acme Pty Ltd"},
            "items": [{"description": "Audit", "quantity": 3, "unit_price": 10.5}],
            "total_amount": 5,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 11
        assert body["total_amount"] == 31.5

    def test_missing_customer_name_is_422(self, client):
        response = client.post("/invoices/", json={
            "invoice_number": "INV-000011",
            "customer_details": {"name": ""},
        })
        assert response.status_code == 422

    def test_negative_quantity_is_422(self, client):
        response = client.post("/invoices/", json={
            "invoice_number": "INV-000011",
            "customer_details": {"name": "Acme"},
            "items": [{"quantity": -2, "unit_price": 1}],
        })
        assert response.status_code == 422


class TestList:

    def test_list_all(self, client, stored):
        response = client.get("/invoices/")

        assert response.status_code == 200
        assert [inv["id"] for inv in response.json()] == [1, 2, 3]

    def test_status_filter(self, client, stored):
        response = client.get("/invoices/", params={"status": "Sent"})

        assert [inv["id"] for inv in response.json()] == [2]

    def test_invalid_status_filter(self, client, stored):
        response = client.get("/invoices/", params={"status": "Archived"})
        assert response.status_code == 400

    def test_search_is_forwarded(self, client, stored):
        client.get("/invoices/", params={"search": "acme"})
        stored.assert_called_once_with(TEST_USER_ID, "acme")

    def test_stats_cover_whole_collection(self, client, stored):
        response = client.get("/invoices/stats")

        body = response.json()
        assert body["count"] == 3
        assert body["total_revenue"] == 78.0
        assert body["pending"] == 52.0


class TestNewInvoice:

    def test_new_is_seeded_from_profile(self, client):
        response = client.get("/invoices/new")

        body = response.json()
        assert body["invoice_number"].startswith("INV-")
        assert body["company_details"]["name"] == "iTEK Solutions"
        assert body["status"] == "Draft"
        assert len(body["items"]) == 1


class TestGet:

    def test_get_missing_is_404(self, client, stored):
        response = client.get("/invoices/404")
        assert response.status_code == 404


class TestDownload:

    def test_download_is_named_pdf(self, client, stored):
        response = client.get("/invoices/2/download")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="Invoice-INV-000002.pdf"'
        assert response.content.startswith(b"%PDF")

    def test_download_failure_is_500(self, client, stored, monkeypatch):
        import pdf.service as pdf_service
        from pdf.export import ExportError

        async def broken(invoice, scale=2):
            raise ExportError("logo unavailable")

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", broken)

        response = client.get("/invoices/2/download")

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to generate PDF: logo unavailable"
