"""Core domain models."""

from core.models.line_item import LineItem, LineItemInput, LineItemFormData, LineItemUnit
from core.models.invoice import (
    Invoice, InvoiceStatus, InvoiceType, EXPOSURE_STATUSES,
    CreateInvoiceRequest, UpdateInvoiceRequest, CancelInvoiceRequest,
    InvoiceFilters, InvoicePage, Pagination,
)
from core.models.trade import TradeForSelection
from core.models.form import InvoiceFormData

__all__ = [
    # LineItem
    "LineItem", "LineItemInput", "LineItemFormData", "LineItemUnit",
    # Invoice
    "Invoice", "InvoiceStatus", "InvoiceType", "EXPOSURE_STATUSES",
    "CreateInvoiceRequest", "UpdateInvoiceRequest", "CancelInvoiceRequest",
    "InvoiceFilters", "InvoicePage", "Pagination",
    # Trade
    "TradeForSelection",
    # Form
    "InvoiceFormData",
]
