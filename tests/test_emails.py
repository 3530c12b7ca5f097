"""Tests for emailing an exported invoice."""

from unittest.mock import Mock

import pytest
import resend
from fastapi import HTTPException

import emails
import invoices.service as invoice_service
from pdf.export import ExportResult


@pytest.fixture
def result():
    return ExportResult(
        filename="Invoice-INV-123456.pdf",
        content=b"%PDF-1.3 test",
        page_width=210.0,
        page_height=328.125,
        image_height=328.125,
    )


@pytest.fixture
def resend_send(monkeypatch):
    send = Mock(return_value={"id": "email_123"})
    monkeypatch.setattr(resend, "api_key", "re_test")
    monkeypatch.setattr(resend.Emails, "send", send)
    return send


def test_message(sample_invoice, result):
    message = emails.build_invoice_message(sample_invoice, result)

    assert message["to"] == ["accounts@acme.test"]
    assert message["subject"] == "Invoice INV-123456 from iTEK Solutions"
    assert "$26.00" in message["html"]
    assert message["attachments"][0]["filename"] == "Invoice-INV-123456.pdf"
    assert bytes(message["attachments"][0]["content"]) == b"%PDF-1.3 test"


def test_send(sample_invoice, result, resend_send):
    response = emails.send_invoice_email(sample_invoice, result)

    assert response == {"status": "sent", "id": "email_123", "to": "accounts@acme.test"}
    resend_send.assert_called_once()


def test_customer_without_email(make_invoice, result, resend_send):
    invoice = make_invoice(customer_details={"name": "Acme Pty Ltd"})

    with pytest.raises(HTTPException) as exc:
        emails.send_invoice_email(invoice, result)

    assert exc.value.status_code == 400
    resend_send.assert_not_called()


def test_not_configured(sample_invoice, result, monkeypatch):
    monkeypatch.setattr(resend, "api_key", None)

    with pytest.raises(HTTPException) as exc:
        emails.send_invoice_email(sample_invoice, result)

    assert exc.value.status_code == 503


def test_provider_failure(sample_invoice, result, resend_send):
    resend_send.side_effect = RuntimeError("rate limited")

    with pytest.raises(HTTPException) as exc:
        emails.send_invoice_email(sample_invoice, result)

    assert exc.value.status_code == 502


def test_send_route(client, sample_invoice, resend_send, monkeypatch):
    monkeypatch.setattr(invoice_service, "get_invoice_by_id", Mock(return_value=sample_invoice))

    response = client.post("/invoices/7/send")

    assert response.status_code == 200
    assert response.json()["status"] == "sent"
    attachment = resend_send.call_args.args[0]["attachments"][0]
    assert bytes(attachment["content"]).startswith(b"%PDF")
