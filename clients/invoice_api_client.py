"""
Invoice API client.

Thin requests wrapper over the back-office invoice endpoints. Every response
uses the envelope {success, data, message?, correlationId?, pagination?}.
The server's record is authoritative: line totals, subtotal, invoice amount
and exposure fields come back from here, never from local arithmetic.

No call is retried. Issue and cancel are irreversible, so a timeout is
raised to the caller as InvoiceApiTimeoutError for an explicit decision.
"""

import json
import logging
from typing import Any

import requests

from clients.config import InvoiceApiConfig
from core.exceptions import (
    InvoiceApiError,
    InvoiceApiTimeoutError,
    InvoiceConflictError,
    InvoiceNotFoundError,
)
from core.models import (
    CancelInvoiceRequest,
    CreateInvoiceRequest,
    Invoice,
    InvoiceFilters,
    InvoicePage,
    Pagination,
    UpdateInvoiceRequest,
)

logger = logging.getLogger(__name__)


class InvoiceApiClient:
    """Calls the Invoice API and returns parsed Invoice records."""

    def __init__(self, config: InvoiceApiConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request and unwrap the envelope.

        Raises:
            InvoiceApiTimeoutError: Request timed out (outcome unknown)
            InvoiceNotFoundError: 404
            InvoiceConflictError: 409, the invoice changed server-side
            InvoiceApiError: Any other transport or server failure
        """
        url = self.config.url(path)

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                timeout=self.config.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"Invoice API {method} {path} timed out: {e}")
            raise InvoiceApiTimeoutError(f"{method} {path} timed out")
        except requests.exceptions.RequestException as e:
            logger.error(f"Invoice API {method} {path} connection failed: {e}")
            raise InvoiceApiError(f"Connection failed: {e}")

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            logger.error(f"Invoice API returned invalid JSON ({response.status_code}): {response.text[:200]}")
            raise InvoiceApiError("Invalid response from Invoice API", status_code=response.status_code)

        if not isinstance(payload, dict):
            raise InvoiceApiError("Unexpected response shape from Invoice API", status_code=response.status_code)

        message = payload.get("message") or response.reason or "Unknown error"
        correlation_id = payload.get("correlationId")

        if response.status_code == 404:
            raise InvoiceNotFoundError(message, status_code=404, correlation_id=correlation_id)
        if response.status_code == 409:
            logger.warning(f"Invoice API conflict on {method} {path}: {message} (correlation_id={correlation_id})")
            raise InvoiceConflictError(message, status_code=409, correlation_id=correlation_id)
        if response.status_code >= 400 or not payload.get("success"):
            logger.error(
                f"Invoice API error on {method} {path}: {response.status_code} {message} "
                f"(correlation_id={correlation_id})"
            )
            raise InvoiceApiError(message, status_code=response.status_code, correlation_id=correlation_id)

        return payload

    def _invoice(self, payload: dict[str, Any]) -> Invoice:
        return Invoice.model_validate(payload["data"])

    def list_invoices(self, filters: InvoiceFilters | None = None) -> InvoicePage:
        """List invoices for the active company. Empty filters are not sent."""
        params = filters.to_query_params() if filters else {}
        payload = self._request("GET", "/invoices", params=params or None)

        pagination = payload.get("pagination")
        return InvoicePage(
            invoices=[Invoice.model_validate(row) for row in payload.get("data") or []],
            pagination=Pagination.model_validate(pagination) if pagination else None,
        )

    def list_invoices_for_trade(self, trade_id: str) -> list[Invoice]:
        payload = self._request("GET", f"/invoices/trade/{trade_id}")
        return [Invoice.model_validate(row) for row in payload.get("data") or []]

    def get_invoice(self, invoice_id: str) -> Invoice:
        return self._invoice(self._request("GET", f"/invoices/{invoice_id}"))

    def create_invoice(self, request: CreateInvoiceRequest) -> Invoice:
        """Create a DRAFT invoice. The response carries server-computed totals."""
        body = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        return self._invoice(self._request("POST", "/invoices", body=body))

    def update_invoice(self, request: UpdateInvoiceRequest) -> Invoice:
        body = request.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"id"})
        return self._invoice(self._request("PUT", f"/invoices/{request.id}", body=body))

    def issue_invoice(self, invoice_id: str) -> Invoice:
        """DRAFT -> ISSUED. The response carries the new exposure fields."""
        return self._invoice(self._request("POST", f"/invoices/{invoice_id}/issue"))

    def cancel_invoice(self, request: CancelInvoiceRequest) -> Invoice:
        body = {"cancelReason": request.cancel_reason}
        return self._invoice(self._request("POST", f"/invoices/{request.id}/cancel", body=body))
