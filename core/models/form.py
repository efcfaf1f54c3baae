"""Invoice form state as held by the editor before submission."""

from pydantic import BaseModel, Field

from core.models.line_item import LineItemFormData, WIRE_MODEL_CONFIG


class InvoiceFormData(BaseModel):
    """
    Whole-invoice draft form.

    Dates are raw strings (ISO YYYY-MM-DD when valid) so an incomplete date
    input can be represented and reported by validation.
    """

    trade_id: str = ""
    invoice_date: str = ""
    due_date: str = ""
    line_items: list[LineItemFormData] = Field(default_factory=list)

    model_config = WIRE_MODEL_CONFIG
