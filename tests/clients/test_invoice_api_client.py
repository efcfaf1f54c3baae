"""
Tests for InvoiceApiClient.

Uses the responses library for HTTP mocking. Focus is on the envelope
contract and the mapping of failures to typed exceptions.
"""

import json

import pytest
import requests
import responses
from responses import matchers
from datetime import date
from decimal import Decimal

from clients.config import InvoiceApiConfig
from clients.invoice_api_client import InvoiceApiClient
from core.exceptions import (
    InvoiceApiError,
    InvoiceApiTimeoutError,
    InvoiceConflictError,
    InvoiceNotFoundError,
)
from core.models import (
    CancelInvoiceRequest,
    Invoice,
    InvoiceFilters,
    InvoiceStatus,
    UpdateInvoiceRequest,
)
from core.validation import build_create_request

BASE = "https://api.example.com/api"


def _wire(data: dict) -> dict:
    """Invoice field values as the server sends them (camelCase JSON)."""
    return Invoice.model_validate(data).model_dump(mode="json", by_alias=True)


@pytest.fixture
def client():
    return InvoiceApiClient(InvoiceApiConfig(base_url="https://api.example.com"))


# =============================================================================
# READS
# =============================================================================


class TestReads:

    @responses.activate
    def test_get_invoice_parses_envelope(self, client, invoice_data):
        responses.add(
            responses.GET,
            f"{BASE}/invoices/inv-0001",
            json={"success": True, "data": _wire(invoice_data())},
            status=200,
        )

        invoice = client.get_invoice("inv-0001")

        assert invoice.invoice_number == "INV-2026-0001"
        assert invoice.subtotal == Decimal("325.00")
        assert invoice.line_items[0].line_total == Decimal("25.00")

    @responses.activate
    def test_list_sends_only_present_filters(self, client, issued_data):
        responses.add(
            responses.GET,
            f"{BASE}/invoices",
            match=[matchers.query_param_matcher({"status": "ISSUED", "tradeId": "trade-0001"})],
            json={
                "success": True,
                "data": [_wire(issued_data())],
                "pagination": {"page": 1, "limit": 20, "total": 1, "totalPages": 1},
            },
            status=200,
        )

        page = client.list_invoices(InvoiceFilters(status=InvoiceStatus.ISSUED, trade_id="trade-0001", search=""))

        assert len(page.invoices) == 1
        assert page.invoices[0].exposed_amount == Decimal("325.00")
        assert page.pagination.total_pages == 1

    @responses.activate
    def test_list_without_filters(self, client):
        responses.add(responses.GET, f"{BASE}/invoices", json={"success": True, "data": []}, status=200)

        page = client.list_invoices()

        assert page.invoices == []
        assert page.pagination is None
        assert responses.calls[0].request.url == f"{BASE}/invoices"

    @responses.activate
    def test_list_for_trade(self, client, invoice_data):
        responses.add(
            responses.GET,
            f"{BASE}/invoices/trade/trade-0001",
            json={"success": True, "data": [_wire(invoice_data())]},
            status=200,
        )

        assert [i.id for i in client.list_invoices_for_trade("trade-0001")] == ["inv-0001"]


# =============================================================================
# WRITES
# =============================================================================


class TestWrites:

    @responses.activate
    def test_create_sends_camel_case_without_totals(self, client, valid_form, invoice_data):
        responses.add(
            responses.POST,
            f"{BASE}/invoices",
            json={"success": True, "data": _wire(invoice_data())},
            status=201,
        )

        client.create_invoice(build_create_request(valid_form))

        body = json.loads(responses.calls[0].request.body)
        assert body["tradeId"] == "trade-0001"
        assert body["invoiceDate"] == "2026-03-01"
        assert body["dueDate"] == "2026-03-31"
        assert body["lineItems"][0] == {
            "description": "Cotton yarn", "hsCode": "5205", "quantity": 10.0, "unit": "KG", "unitPrice": 2.5,
        }
        assert "hsCode" not in body["lineItems"][1]
        assert "subtotal" not in body
        assert all("lineTotal" not in item and "id" not in item for item in body["lineItems"])

    @responses.activate
    def test_update_omits_id_from_body(self, client, invoice_data):
        responses.add(
            responses.PUT,
            f"{BASE}/invoices/inv-0001",
            json={"success": True, "data": _wire(invoice_data(due_date=date(2026, 4, 30)))},
            status=200,
        )

        updated = client.update_invoice(UpdateInvoiceRequest(id="inv-0001", due_date=date(2026, 4, 30)))

        assert json.loads(responses.calls[0].request.body) == {"dueDate": "2026-04-30"}
        assert updated.due_date == date(2026, 4, 30)

    @responses.activate
    def test_issue_returns_exposure(self, client, issued_data):
        responses.add(
            responses.POST,
            f"{BASE}/invoices/inv-0001/issue",
            json={"success": True, "data": _wire(issued_data())},
            status=200,
        )

        issued = client.issue_invoice("inv-0001")

        assert issued.status == InvoiceStatus.ISSUED
        assert issued.unhedged_amount == Decimal("325.00")

    @responses.activate
    def test_cancel_sends_reason(self, client, invoice_data):
        responses.add(
            responses.POST,
            f"{BASE}/invoices/inv-0001/cancel",
            match=[matchers.json_params_matcher({"cancelReason": "Buyer withdrew the order"})],
            json={"success": True, "data": _wire(invoice_data(
                status=InvoiceStatus.CANCELLED, cancel_reason="Buyer withdrew the order",
            ))},
            status=200,
        )

        cancelled = client.cancel_invoice(CancelInvoiceRequest(id="inv-0001", cancel_reason="Buyer withdrew the order"))

        assert cancelled.cancel_reason == "Buyer withdrew the order"


# =============================================================================
# ERROR MAPPING
# =============================================================================


class TestErrors:

    @responses.activate
    def test_404_raises_not_found(self, client):
        responses.add(
            responses.GET,
            f"{BASE}/invoices/missing",
            json={"success": False, "message": "Invoice not found", "correlationId": "corr-1"},
            status=404,
        )

        with pytest.raises(InvoiceNotFoundError) as exc_info:
            client.get_invoice("missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.correlation_id == "corr-1"

    @responses.activate
    def test_409_raises_conflict(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/invoices/inv-0001/issue",
            json={"success": False, "message": "Invoice is not in DRAFT status"},
            status=409,
        )

        with pytest.raises(InvoiceConflictError, match="not in DRAFT"):
            client.issue_invoice("inv-0001")

    @responses.activate
    def test_server_error(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/invoices/inv-0001/issue",
            json={"success": False, "message": "Internal error", "correlationId": "corr-9"},
            status=500,
        )

        with pytest.raises(InvoiceApiError) as exc_info:
            client.issue_invoice("inv-0001")

        assert type(exc_info.value) is InvoiceApiError
        assert exc_info.value.status_code == 500
        assert exc_info.value.correlation_id == "corr-9"

    @responses.activate
    def test_success_false_with_200_is_an_error(self, client):
        responses.add(
            responses.GET,
            f"{BASE}/invoices/inv-0001",
            json={"success": False, "message": "Company not selected"},
            status=200,
        )

        with pytest.raises(InvoiceApiError, match="Company not selected"):
            client.get_invoice("inv-0001")

    @responses.activate
    def test_invalid_json(self, client):
        responses.add(responses.GET, f"{BASE}/invoices/inv-0001", body="<html>oops</html>", status=502)

        with pytest.raises(InvoiceApiError, match="Invalid response"):
            client.get_invoice("inv-0001")

    @responses.activate
    def test_timeout_is_distinct(self, client):
        responses.add(
            responses.POST,
            f"{BASE}/invoices/inv-0001/issue",
            body=requests.exceptions.ReadTimeout("read timed out"),
        )

        with pytest.raises(InvoiceApiTimeoutError):
            client.issue_invoice("inv-0001")

    @responses.activate
    def test_connection_error(self, client):
        responses.add(
            responses.GET,
            f"{BASE}/invoices/inv-0001",
            body=requests.exceptions.ConnectionError("refused"),
        )

        with pytest.raises(InvoiceApiError, match="Connection failed"):
            client.get_invoice("inv-0001")
