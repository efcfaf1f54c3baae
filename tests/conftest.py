"""Shared test fixtures for the invoice core test suite."""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env")

from core.models import Invoice, InvoiceFormData, InvoiceStatus, LineItemFormData
from core.permissions import Role
from utils.user_context import clear_current_user, user_context


# =============================================================================
# TEST USER CONSTANTS
# =============================================================================

TEST_USER_ID = "00000000-0000-0000-0000-000000000001"
TEST_INVOICE_ID = "inv-0001"
TEST_TRADE_ID = "trade-0001"
CREATED_AT = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# USER CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_user_context():
    """Ensure clean user context before and after each test."""
    clear_current_user()
    yield
    clear_current_user()


@pytest.fixture
def as_admin():
    with user_context(TEST_USER_ID, Role.ADMIN):
        yield TEST_USER_ID


@pytest.fixture
def as_finance():
    with user_context(TEST_USER_ID, Role.FINANCE):
        yield TEST_USER_ID


@pytest.fixture
def as_auditor():
    with user_context(TEST_USER_ID, Role.AUDITOR):
        yield TEST_USER_ID


# =============================================================================
# INVOICE FIXTURES
# =============================================================================


def _invoice_data(**overrides) -> dict:
    """
    Field values for a valid DRAFT invoice worth 325.00 USD.

    Two lines: 10 x 2.50 and 3 x 100.00.
    """
    data = {
        "id": TEST_INVOICE_ID,
        "company_id": "company-0001",
        "trade_id": TEST_TRADE_ID,
        "party_id": "party-0001",
        "invoice_number": "INV-2026-0001",
        "invoice_date": date(2026, 3, 1),
        "due_date": date(2026, 3, 31),
        "invoice_type": "EXPORT",
        "currency": "USD",
        "line_items": [
            {"id": "li-1", "description": "Cotton yarn", "hs_code": "5205",
             "quantity": Decimal("10"), "unit": "KG", "unit_price": Decimal("2.50")},
            {"id": "li-2", "description": "Dye drums", "hs_code": None,
             "quantity": Decimal("3"), "unit": "PCS", "unit_price": Decimal("100.00")},
        ],
        "subtotal": Decimal("325.00"),
        "invoice_amount": Decimal("325.00"),
        "outstanding_amount": Decimal("325.00"),
        "status": InvoiceStatus.DRAFT,
        "created_by": TEST_USER_ID,
        "created_at": CREATED_AT,
    }
    data.update(overrides)
    return data


def _issued_data(**overrides) -> dict:
    """Field values for the same invoice once issued with nothing hedged."""
    data = _invoice_data(
        status=InvoiceStatus.ISSUED,
        exposure_id="exp-0001",
        exposed_amount=Decimal("325.00"),
        hedged_amount=Decimal("0"),
        unhedged_amount=Decimal("325.00"),
        issued_by=TEST_USER_ID,
        issued_at=CREATED_AT,
    )
    data.update(overrides)
    return data


@pytest.fixture
def draft_invoice() -> Invoice:
    return Invoice.model_validate(_invoice_data())


@pytest.fixture
def issued_invoice() -> Invoice:
    return Invoice.model_validate(_issued_data())


@pytest.fixture
def cancelled_invoice() -> Invoice:
    return Invoice.model_validate(_invoice_data(
        status=InvoiceStatus.CANCELLED,
        cancel_reason="Buyer withdrew the order",
        cancelled_by=TEST_USER_ID,
        cancelled_at=CREATED_AT,
    ))


# =============================================================================
# FORM FIXTURES
# =============================================================================


def _form_row(row_id: str = "temp_1", **overrides) -> LineItemFormData:
    values = {
        "id": row_id,
        "description": "Cotton yarn",
        "hs_code": "5205",
        "quantity": "10",
        "unit": "KG",
        "unit_price": "2.50",
    }
    values.update(overrides)
    return LineItemFormData(**values)


@pytest.fixture
def valid_form() -> InvoiceFormData:
    """A submittable form matching the draft_invoice fixture."""
    return InvoiceFormData(
        trade_id=TEST_TRADE_ID,
        invoice_date="2026-03-01",
        due_date="2026-03-31",
        line_items=[
            _form_row("temp_1"),
            _form_row("temp_2", description="Dye drums", hs_code="", quantity="3",
                      unit="PCS", unit_price="100.00"),
        ],
    )


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def test_user_id() -> str:
    return TEST_USER_ID


@pytest.fixture
def invoice_data():
    """Build DRAFT invoice field values, with overrides: invoice_data(due_date=...)."""
    return _invoice_data


@pytest.fixture
def issued_data():
    """Build ISSUED invoice field values, with overrides."""
    return _issued_data


@pytest.fixture
def form_row():
    """Build a valid grid row, with overrides: form_row("temp_2", quantity="")."""
    return _form_row
