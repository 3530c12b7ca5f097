"""Tests for the server-rendered dashboard and preview screens."""

from unittest.mock import Mock

import pytest
from fastapi import HTTPException

import invoices.service as invoice_service
import pdf.service as pdf_service
from pdf.export import ExportError


@pytest.fixture
def stored(monkeypatch, make_invoice):
    invoices = [
        make_invoice(id=1, invoice_number="INV-000001", status="Paid"),
        make_invoice(id=2, invoice_number="INV-000002", status="Sent"),
        make_invoice(id=3, invoice_number="INV-000003", status="Overdue"),
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


class TestDashboard:

    def test_lists_every_invoice(self, client, stored):
        page = client.get("/dashboard/").text

        for number in ("INV-000001", "INV-000002", "INV-000003"):
            assert number in page
        assert "$78.00" in page

    @pytest.mark.parametrize("status", ["All", "Paid", "Sent", "Draft", "Overdue"])
    def test_stat_cards_ignore_filter(self, client, stored, status):
        page = client.get("/dashboard/", params={"status": status}).text

        assert '<div class="label">Total Revenue</div><div class="value">$78.00</div>' in page
        assert '<div class="label">Pending</div><div class="value">$52.00</div>' in page
        assert '<div class="label">Total Invoices</div><div class="value">3</div>' in page

    def test_filter_limits_rows(self, client, stored):
        page = client.get("/dashboard/", params={"status": "Paid"}).text

        assert "<td>INV-000001</td>" in page
        assert "<td>INV-000002</td>" not in page

    def test_empty_filter(self, client, stored):
        page = client.get("/dashboard/", params={"status": "Draft"}).text
        assert "No invoices found." in page

    def test_invalid_filter_shows_notice(self, client, stored):
        response = client.get("/dashboard/", params={"status": "Archived"})

        assert response.status_code == 200
        assert "Invalid status filter" in response.text

    def test_search_goes_to_store(self, client, stored):
        client.get("/dashboard/", params={"search": "acme"})
        stored.assert_called_once_with(1, "acme")

    def test_token_carried_into_links(self, client, stored):
        page = client.get("/dashboard/", params={"token": "abc"}).text
        assert "/dashboard/invoices/1?token=abc" in page


class TestDelete:

    def test_delete_removes_row_without_refetch(self, client, stored, monkeypatch):
        delete = Mock(return_value={"message": "Invoice deleted successfully", "id": 2})
        monkeypatch.setattr(invoice_service, "delete_invoice", delete)

        page = client.post("/dashboard/invoices/2/delete").text

        delete.assert_called_once_with(1, 2)
        assert stored.call_count == 1
        assert "<td>INV-000002</td>" not in page
        assert '<div class="label">Total Invoices</div><div class="value">2</div>' in page

    def test_failed_delete_keeps_row(self, client, stored, monkeypatch):
        delete = Mock(side_effect=HTTPException(status_code=500, detail="Failed to delete invoice: locked"))
        monkeypatch.setattr(invoice_service, "delete_invoice", delete)

        page = client.post("/dashboard/invoices/2/delete").text

        assert "<td>INV-000002</td>" in page
        assert "Failed to delete invoice: locked" in page

    def test_list_fetch_failure_is_shown_not_raised(self, client, stored, monkeypatch):
        monkeypatch.setattr(invoice_service, "get_all_invoices",
                            Mock(side_effect=HTTPException(status_code=500, detail="Failed to fetch invoices: down")))
        delete = Mock()
        monkeypatch.setattr(invoice_service, "delete_invoice", delete)

        response = client.post("/dashboard/invoices/2/delete")

        assert response.status_code == 200
        assert "Failed to fetch invoices: down" in response.text
        delete.assert_not_called()


class TestPreview:

    def test_preview_renders_document(self, client, stored):
        response = client.get("/dashboard/invoices/2")

        assert response.status_code == 200
        assert 'id="payment-link"' in response.text
        assert "INV-000002" in response.text
        assert "window.print()" in response.text

    def test_failed_fetch_redirects_to_list(self, client, stored):
        response = client.get("/dashboard/invoices/404", params={"token": "abc"}, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard/?error=Failed+to+fetch+invoice&token=abc"

    def test_list_shows_redirect_error(self, client, stored):
        page = client.get("/dashboard/", params={"error": "Failed to fetch invoice"}).text
        assert "Failed to fetch invoice" in page


class TestPreviewDownload:

    def test_download(self, client, stored):
        response = client.get("/dashboard/invoices/2/download")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="Invoice-INV-000002.pdf"'

    def test_failed_export_returns_to_preview_with_notice(self, client, stored, monkeypatch):
        async def broken(invoice, scale=2):
            raise ExportError("logo unavailable")

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", broken)

        response = client.get("/dashboard/invoices/2/download", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard/invoices/2?notice=Failed+to+generate+PDF"

    def test_missing_invoice_download_redirects(self, client, stored):
        response = client.get("/dashboard/invoices/404/download", follow_redirects=False)
        assert response.status_code == 303
