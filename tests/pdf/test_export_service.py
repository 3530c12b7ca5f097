"""Tests for the export task and PDF HTTP helpers."""

import asyncio

import pytest
from fastapi import HTTPException

import pdf.service as pdf_service
from pdf.export import ExportError
from pdf.service import ExportTask, EXPORT_FAILED_MESSAGE, pdf_response


class TestExportTask:

    def test_preparing_while_running_and_cleared_after(self, sample_invoice, monkeypatch):
        task = ExportTask()
        seen = []

        async def export(invoice):
            seen.append(task.preparing)
            return "result"

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", export)

        result = asyncio.run(task.run(sample_invoice))

        assert result == "result"
        assert seen == [True]
        assert task.preparing is False
        assert task.notification is None

    def test_failure_notifies_and_clears_flag(self, sample_invoice, monkeypatch):
        async def export(invoice):
            raise ExportError("logo unavailable")

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", export)
        task = ExportTask()

        result = asyncio.run(task.run(sample_invoice))

        assert result is None
        assert task.preparing is False
        assert task.notification.message == EXPORT_FAILED_MESSAGE
        assert task.notification.detail == "logo unavailable"

    def test_unexpected_error_also_clears_flag(self, sample_invoice, monkeypatch):
        async def export(invoice):
            raise KeyError("boom")

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", export)
        task = ExportTask()

        assert asyncio.run(task.run(sample_invoice)) is None
        assert task.preparing is False
        assert task.notification is not None

    def test_retry_after_failure(self, sample_invoice, monkeypatch):
        outcomes = [ExportError("timeout"), "result"]

        async def export(invoice):
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", export)
        task = ExportTask()

        assert asyncio.run(task.run(sample_invoice)) is None
        assert asyncio.run(task.run(sample_invoice)) == "result"
        assert task.notification is None

    def test_real_export(self, sample_invoice):
        task = ExportTask()

        result = asyncio.run(task.run(sample_invoice))

        assert result.filename == "Invoice-INV-123456.pdf"
        assert result.content.startswith(b"%PDF")


class TestHttpHelpers:

    def test_export_or_500(self, sample_invoice, monkeypatch):
        async def export(invoice):
            raise ExportError("font missing")

        monkeypatch.setattr(pdf_service, "export_invoice_pdf_async", export)

        with pytest.raises(HTTPException) as exc:
            asyncio.run(pdf_service.export_or_500(sample_invoice))

        assert exc.value.status_code == 500
        assert exc.value.detail == f"{EXPORT_FAILED_MESSAGE}: font missing"

    def test_pdf_response_headers(self, sample_invoice):
        result = asyncio.run(pdf_service.export_or_500(sample_invoice))

        response = pdf_response(result)

        assert response.media_type == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="Invoice-INV-123456.pdf"'
