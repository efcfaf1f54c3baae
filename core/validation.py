"""
Invoice form validation and form <-> API conversions.

Validators return {field: message} for failing fields only; an empty dict
means valid. Nothing here raises for bad input. Submission code decides
what to do with the errors.
"""

from datetime import date
from uuid import uuid4

from core.constants import (
    CANCEL_REASON_MAX_LENGTH,
    CANCEL_REASON_MIN_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    HS_CODE_PATTERN,
    LINE_ITEMS_MAX,
    LINE_ITEMS_MIN,
    QUANTITY_MAX,
    QUANTITY_MIN,
    UNIT_PRICE_MAX,
    UNIT_PRICE_MIN,
)
from core.models import (
    CreateInvoiceRequest,
    InvoiceFormData,
    LineItem,
    LineItemFormData,
    LineItemInput,
    LineItemUnit,
    TradeForSelection,
    UpdateInvoiceRequest,
)
from core.numeric import format_grid_number, parse_numeric_input
from utils.timezone import default_due_date, format_api_date, parse_calendar_date, today_utc


# =============================================================================
# LINE ITEMS
# =============================================================================


def validate_line_item(item: LineItemFormData) -> dict[str, str]:
    """
    Validate one grid row.

    Args:
        item: Row as typed by the user

    Returns:
        {field: message} for failing fields (description, hs_code,
        quantity, unit, unit_price). Empty dict when the row is valid.
    """
    errors: dict[str, str] = {}

    description = item.description.strip()
    if not description:
        errors["description"] = "Description is required"
    elif len(description) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Max {DESCRIPTION_MAX_LENGTH} characters"

    hs_code = item.hs_code.strip()
    if hs_code and not HS_CODE_PATTERN.fullmatch(hs_code):
        errors["hs_code"] = "Invalid HS Code (4-8 digits)"

    quantity = parse_numeric_input(item.quantity)
    if not item.quantity.strip():
        errors["quantity"] = "Required"
    elif quantity < QUANTITY_MIN:
        errors["quantity"] = f"Min {QUANTITY_MIN}"
    elif quantity > QUANTITY_MAX:
        errors["quantity"] = "Too large"

    unit = item.unit.strip()
    if not unit:
        errors["unit"] = "Required"
    elif unit not in LineItemUnit.codes():
        errors["unit"] = "Unknown unit"

    unit_price = parse_numeric_input(item.unit_price)
    if not item.unit_price.strip():
        errors["unit_price"] = "Required"
    elif unit_price < UNIT_PRICE_MIN:
        errors["unit_price"] = f"Min {UNIT_PRICE_MIN}"
    elif unit_price > UNIT_PRICE_MAX:
        errors["unit_price"] = "Too large"

    return errors


def row_errors(item: LineItemFormData, read_only: bool = False) -> dict[str, str]:
    """Errors to render for a grid row. Read-only grids (issued invoices) skip validation."""
    if read_only:
        return {}
    return validate_line_item(item)


def create_empty_line_item() -> LineItemFormData:
    return LineItemFormData(id=f"temp_{uuid4().hex}")


def convert_line_items_for_api(items: list[LineItemFormData]) -> list[LineItemInput]:
    """
    Convert validated grid rows to the submission shape.

    Drops client-local ids and blank HS codes. Totals are not sent; the
    Invoice API computes them.
    """
    converted = []
    for item in items:
        hs_code = item.hs_code.strip()
        converted.append(LineItemInput(
            description=item.description.strip(),
            hs_code=hs_code or None,
            quantity=parse_numeric_input(item.quantity),
            unit=LineItemUnit(item.unit.strip()),
            unit_price=parse_numeric_input(item.unit_price),
        ))
    return converted


def convert_line_items_from_api(items: list[LineItem]) -> list[LineItemFormData]:
    """Editable rows for a persisted invoice. Quantity keeps three decimals, price two."""
    return [
        LineItemFormData(
            id=item.id,
            description=item.description,
            hs_code=item.hs_code or "",
            quantity=format_grid_number(item.quantity, 3),
            unit=item.unit,
            unit_price=format_grid_number(item.unit_price, 2),
        )
        for item in items
    ]


# =============================================================================
# WHOLE FORM
# =============================================================================


def new_invoice_form(trade: TradeForSelection | None = None, today: date | None = None) -> InvoiceFormData:
    """Fresh draft form: invoice dated today, due after the default payment term, one empty row."""
    invoice_date = today or today_utc()
    return InvoiceFormData(
        trade_id=trade.id if trade else "",
        invoice_date=format_api_date(invoice_date),
        due_date=format_api_date(default_due_date(invoice_date)),
        line_items=[create_empty_line_item()],
    )


def _validate_dates(form: InvoiceFormData, errors: dict[str, str]) -> None:
    invoice_date = parse_calendar_date(form.invoice_date)
    if not form.invoice_date.strip():
        errors["invoice_date"] = "Invoice date is required"
    elif invoice_date is None:
        errors["invoice_date"] = "Invoice date is not a valid date"

    due_date = parse_calendar_date(form.due_date)
    if not form.due_date.strip():
        errors["due_date"] = "Due date is required"
    elif due_date is None:
        errors["due_date"] = "Due date is not a valid date"
    elif invoice_date is not None and due_date < invoice_date:
        errors["due_date"] = "Due date cannot be before invoice date"


def _validate_line_items(items: list[LineItemFormData]) -> str | None:
    if len(items) < LINE_ITEMS_MIN:
        return "At least one line item is required"
    if len(items) > LINE_ITEMS_MAX:
        return f"Maximum {LINE_ITEMS_MAX} line items allowed"
    if not any(item.description.strip() for item in items):
        return "At least one line item needs a description"
    if any(validate_line_item(item) for item in items):
        return "Please fix errors in line items"
    return None


def validate_invoice_form(form: InvoiceFormData) -> dict[str, str]:
    """
    Validate a draft before create/update submission.

    Row-level detail is not repeated here; a failing row produces one
    summary message under "line_items".

    Returns:
        {field: message} for trade_id, invoice_date, due_date, line_items.
        Empty dict means the form can be submitted.
    """
    errors: dict[str, str] = {}

    if not form.trade_id.strip():
        errors["trade_id"] = "Please select a trade"

    _validate_dates(form, errors)

    line_items_error = _validate_line_items(form.line_items)
    if line_items_error:
        errors["line_items"] = line_items_error

    return errors


def build_create_request(form: InvoiceFormData) -> CreateInvoiceRequest:
    """Submission payload for a validated form."""
    return CreateInvoiceRequest(
        trade_id=form.trade_id.strip(),
        invoice_date=parse_calendar_date(form.invoice_date),
        due_date=parse_calendar_date(form.due_date),
        line_items=convert_line_items_for_api(form.line_items),
    )


def build_update_request(invoice_id: str, form: InvoiceFormData) -> UpdateInvoiceRequest:
    return UpdateInvoiceRequest(
        id=invoice_id,
        invoice_date=parse_calendar_date(form.invoice_date),
        due_date=parse_calendar_date(form.due_date),
        line_items=convert_line_items_for_api(form.line_items),
    )


# =============================================================================
# CANCELLATION
# =============================================================================


def validate_cancel_reason(reason: str | None) -> str | None:
    """
    Check a cancellation reason.

    Returns:
        Error message, or None if the trimmed reason is 10-500 characters.
    """
    trimmed = (reason or "").strip()
    if len(trimmed) < CANCEL_REASON_MIN_LENGTH:
        return f"Reason must be at least {CANCEL_REASON_MIN_LENGTH} characters"
    if len(trimmed) > CANCEL_REASON_MAX_LENGTH:
        return f"Reason must not exceed {CANCEL_REASON_MAX_LENGTH} characters"
    return None
