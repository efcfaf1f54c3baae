"""Trade selection models.

Trades are owned by another subsystem. An invoice only needs the selected
trade's id, party and currency to seed a new draft.
"""

from datetime import datetime

from pydantic import BaseModel

from core.models.invoice import InvoiceType
from core.models.line_item import WIRE_MODEL_CONFIG

DEFAULT_CURRENCY = "USD"


class TradeForSelection(BaseModel):
    """An approved trade offered in the trade picker."""

    id: str
    trade_number: str
    trade_type: InvoiceType
    party_id: str
    party_name: str
    currency: str | None = None
    created_at: datetime

    model_config = WIRE_MODEL_CONFIG

    @property
    def invoice_currency(self) -> str:
        return self.currency or DEFAULT_CURRENCY
