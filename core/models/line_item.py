"""Line item domain models.

Amounts are Decimal. Wire format is camelCase (hsCode, unitPrice, lineTotal);
Python code uses the snake_case field names.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_serializer, model_validator
from pydantic.alias_generators import to_camel

from core.constants import (
    DEFAULT_UNIT,
    DESCRIPTION_MAX_LENGTH,
    QUANTITY_MAX,
    QUANTITY_MIN,
    UNIT_PRICE_MAX,
    UNIT_PRICE_MIN,
)
from core.numeric import multiply, round2

WIRE_MODEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
    "from_attributes": True,
}


class LineItemUnit(str, Enum):
    """Unit codes a line item quantity can be expressed in."""

    PCS = "PCS"
    KG = "KG"
    MTR = "MTR"
    LTR = "LTR"
    SET = "SET"
    BOX = "BOX"
    CTN = "CTN"
    PKT = "PKT"
    DOZ = "DOZ"
    NOS = "NOS"

    @property
    def label(self) -> str:
        return _UNIT_LABELS[self]

    @classmethod
    def codes(cls) -> frozenset[str]:
        return frozenset(unit.value for unit in cls)


_UNIT_LABELS = {
    LineItemUnit.PCS: "Pieces",
    LineItemUnit.KG: "Kilograms",
    LineItemUnit.MTR: "Meters",
    LineItemUnit.LTR: "Liters",
    LineItemUnit.SET: "Sets",
    LineItemUnit.BOX: "Boxes",
    LineItemUnit.CTN: "Cartons",
    LineItemUnit.PKT: "Packets",
    LineItemUnit.DOZ: "Dozens",
    LineItemUnit.NOS: "Numbers",
}


class LineItemInput(BaseModel):
    """Line item as submitted to the Invoice API. Totals are never sent."""

    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    hs_code: str | None = Field(None, pattern=r"^[0-9]{4,8}$")
    quantity: Decimal = Field(..., ge=QUANTITY_MIN, le=QUANTITY_MAX)
    unit: LineItemUnit
    unit_price: Decimal = Field(..., ge=UNIT_PRICE_MIN, le=UNIT_PRICE_MAX)

    model_config = WIRE_MODEL_CONFIG

    @field_serializer("quantity", "unit_price", when_used="json")
    def serialize_number(self, value: Decimal) -> float:
        """The Invoice API takes JSON numbers, not decimal strings."""
        return float(value)


class LineItem(BaseModel):
    """Full line item entity as returned by the Invoice API."""

    id: str
    description: str
    hs_code: str | None = None
    quantity: Decimal
    unit: str
    unit_price: Decimal
    line_total: Decimal = Decimal("0.00")

    model_config = WIRE_MODEL_CONFIG

    @model_validator(mode="after")
    def recompute_line_total(self) -> "LineItem":
        """line_total is always derived from quantity * unit_price, whatever was supplied."""
        self.line_total = round2(multiply(self.quantity, self.unit_price))
        return self


class LineItemFormData(BaseModel):
    """
    Editable grid row.

    quantity and unit_price stay raw strings so half-typed values survive
    re-renders. id is a client-local key, dropped on submission.
    """

    id: str
    description: str = ""
    hs_code: str = ""
    quantity: str = ""
    unit: str = DEFAULT_UNIT
    unit_price: str = ""

    model_config = WIRE_MODEL_CONFIG
