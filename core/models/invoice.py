"""Invoice domain models.

Amounts are Decimal in the invoice currency. Exposure fields belong to
issued invoices only; the model refuses draft or cancelled records that
carry them. An issued record may still lack them until the exposure
subsystem has populated its figures.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from core.models.line_item import LineItem, LineItemInput, WIRE_MODEL_CONFIG


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "DRAFT"
    ISSUED = "ISSUED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    SETTLED = "SETTLED"
    CANCELLED = "CANCELLED"


class InvoiceType(str, Enum):
    """Direction of the underlying trade."""

    EXPORT = "EXPORT"
    IMPORT = "IMPORT"


EXPOSURE_STATUSES = frozenset({
    InvoiceStatus.ISSUED,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.SETTLED,
})

_EXPOSURE_FIELDS = ("exposure_id", "exposed_amount", "hedged_amount", "unhedged_amount")


class Invoice(BaseModel):
    """Full invoice entity as returned by the Invoice API."""

    id: str
    company_id: str | None = None
    trade_id: str
    party_id: str
    invoice_number: str
    invoice_date: date
    due_date: date
    invoice_type: InvoiceType | None = None
    currency: str

    line_items: list[LineItem] = Field(default_factory=list)

    subtotal: Decimal
    invoice_amount: Decimal
    outstanding_amount: Decimal
    paid_amount: Decimal = Decimal("0")

    status: InvoiceStatus

    # Join fields
    trade_number: str | None = None
    party_name: str | None = None

    # Exposure (issued invoices only)
    exposure_id: str | None = None
    exposed_amount: Decimal | None = None
    hedged_amount: Decimal | None = None
    unhedged_amount: Decimal | None = None

    created_by: str
    created_by_name: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    issued_by: str | None = None
    issued_by_name: str | None = None
    issued_at: datetime | None = None

    cancelled_by: str | None = None
    cancelled_by_name: str | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None

    model_config = WIRE_MODEL_CONFIG

    @model_validator(mode="after")
    def check_invariants(self) -> "Invoice":
        if self.due_date < self.invoice_date:
            raise ValueError(
                f"Invoice {self.invoice_number}: due date {self.due_date} "
                f"precedes invoice date {self.invoice_date}"
            )

        # Issued records may arrive before the exposure subsystem fills them in.
        if self.status not in EXPOSURE_STATUSES:
            present = [name for name in _EXPOSURE_FIELDS if getattr(self, name) is not None]
            if present:
                raise ValueError(
                    f"Invoice {self.invoice_number}: status {self.status.value} "
                    f"cannot carry exposure fields ({', '.join(present)})"
                )

        if self.outstanding_amount < 0:
            raise ValueError(f"Invoice {self.invoice_number}: outstanding amount is negative")
        if self.outstanding_amount != self.invoice_amount - self.paid_amount:
            raise ValueError(
                f"Invoice {self.invoice_number}: outstanding amount "
                f"{self.outstanding_amount} != {self.invoice_amount} - {self.paid_amount}"
            )

        return self

    def with_changes(self, **changes: Any) -> "Invoice":
        """Copy with changes applied, re-running the invariant checks."""
        data = self.model_dump()
        data.update(changes)
        return Invoice.model_validate(data)


class CreateInvoiceRequest(BaseModel):
    """Payload for creating a draft invoice."""

    trade_id: str = Field(..., min_length=1)
    invoice_date: date
    due_date: date
    line_items: list[LineItemInput] = Field(..., min_length=1, max_length=100)

    model_config = WIRE_MODEL_CONFIG


class UpdateInvoiceRequest(BaseModel):
    """Payload for editing a draft invoice. Omitted fields are left unchanged."""

    id: str
    invoice_date: date | None = None
    due_date: date | None = None
    line_items: list[LineItemInput] | None = Field(None, min_length=1, max_length=100)

    model_config = WIRE_MODEL_CONFIG


class CancelInvoiceRequest(BaseModel):
    """Payload for cancelling a draft invoice."""

    id: str
    cancel_reason: str

    model_config = WIRE_MODEL_CONFIG


class InvoiceFilters(BaseModel):
    """List filters passed through to the Invoice API as query parameters."""

    status: InvoiceStatus | None = None
    trade_id: str | None = None
    party_id: str | None = None
    currency: str | None = None
    search: str | None = None
    page: int | None = Field(None, ge=1)
    limit: int | None = Field(None, ge=1)

    model_config = WIRE_MODEL_CONFIG

    def to_query_params(self) -> dict[str, str]:
        """camelCase key/value pairs, omitting absent and empty values."""
        params = {}
        for name, value in self.model_dump(mode="json", by_alias=True).items():
            if value is None or value == "":
                continue
            params[name] = str(value)
        return params


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    model_config = WIRE_MODEL_CONFIG


class InvoicePage(BaseModel):
    """One page of invoices from a list call."""

    invoices: list[Invoice]
    pagination: Pagination | None = None
