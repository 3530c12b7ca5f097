"""Shared test fixtures for the invoice test suite."""

import os

# Settings are read at import time; pin them before any project import
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["PAYMENT_URL"] = "https://pay.example.com/invoices"
os.environ["LOGO_PATH"] = ""
os.environ["CARD_ICON_PATHS"] = ""
os.environ["FONT_PATH"] = ""
os.environ["FONT_BOLD_PATH"] = ""
os.environ["EXPORT_SCALE"] = "2"

from datetime import date, datetime
from unittest.mock import Mock

import pytest


# =============================================================================
# TEST USER
# =============================================================================

TEST_USER_ID = 1
TEST_USER_EMAIL = "owner@itek.test"


@pytest.fixture
def current_user():
    from users.models import CurrentUser, CompanyProfile

    return CurrentUser(
        id=TEST_USER_ID,
        email=TEST_USER_EMAIL,
        company_profile=CompanyProfile(
            name="iTEK Solutions",
            address="130 University Drive\nCallaghan NSW 2308",
            phone="(04) 5066 2270",
            website="iteksolutions.com.au",
            abn="96 678 973 085",
            bank_name="Commonwealth Bank",
            account_number="12345678",
            bsb="062-000",
        ),
    )


# =============================================================================
# INVOICE DATA
# =============================================================================

def invoice_row(**overrides) -> dict:
    """A row as RealDictCursor returns it from the invoices table."""
    row = {
        "id": 7,
        "user_id": TEST_USER_ID,
        "invoice_number": "INV-123456",
        "invoice_date": date(2026, 1, 5),
        "due_date": date(2026, 1, 19),
        "reference": "PO-77",
        "customer_details": {
            "name": "Acme Pty Ltd",
            "address": "1 Example St\nNewcastle NSW 2300",
            "email": "accounts@acme.test",
            "phone": "02 4000 0000",
            "website": "acme.test",
        },
        "items": [
            {"description": "Website build", "quantity": 2, "unit_price": 10.5, "total": 21.0},
            {"description": "Hosting", "quantity": 1, "unit_price": 5, "total": 5.0},
        ],
        "total_amount": 26.0,
        "company_details": {
            "name": "iTEK Solutions",
            "address": "130 University Drive\nCallaghan NSW 2308",
            "phone": "(04) 5066 2270",
            "email": TEST_USER_EMAIL,
            "website": "iteksolutions.com.au",
            "abn": "96 678 973 085",
            "amount_enclosed": "",
        },
        "payment_instructions": {
            "bank_name": "Commonwealth Bank",
            "account_number": "12345678",
            "bsb": "062-000",
        },
        "status": "Sent",
        "created_at": datetime(2026, 1, 5, 9, 30),
        "updated_at": datetime(2026, 1, 5, 9, 30),
    }
    row.update(overrides)
    return row


@pytest.fixture
def make_invoice():
    """Factory for Invoice models; keyword overrides replace row fields."""
    from invoices.models import Invoice

    def _make(**overrides):
        return Invoice(**invoice_row(**overrides))

    return _make


@pytest.fixture
def sample_invoice(make_invoice):
    return make_invoice()


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture
def mock_db(monkeypatch):
    """
    Replace get_db_connection in the invoice service with a Mock.
    Returns (conn, cursor); set cursor.fetchone / fetchall per test.
    """
    import invoices.service as invoice_service

    cursor = Mock()
    conn = Mock()
    conn.cursor.return_value = cursor
    monkeypatch.setattr(invoice_service, "get_db_connection", lambda: conn)
    return conn, cursor


# =============================================================================
# HTTP CLIENT
# =============================================================================

@pytest.fixture
def client(current_user):
    """TestClient with authentication resolved to the test user. Startup (schema) is not run."""
    from fastapi.testclient import TestClient
    from main import app
    from auth.service import get_current_user

    app.dependency_overrides[get_current_user] = lambda: current_user
    yield TestClient(app)
    app.dependency_overrides.clear()
