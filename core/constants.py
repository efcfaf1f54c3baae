"""Business limits for invoices and line items."""

import re
from decimal import Decimal

# Line items
DESCRIPTION_MAX_LENGTH = 500
HS_CODE_PATTERN = re.compile(r"[0-9]{4,8}")
QUANTITY_MIN = Decimal("0.001")
QUANTITY_MAX = Decimal("999999999")
UNIT_PRICE_MIN = Decimal("0.01")
UNIT_PRICE_MAX = Decimal("999999999")
DEFAULT_UNIT = "PCS"

# Invoice form
LINE_ITEMS_MIN = 1
LINE_ITEMS_MAX = 100

# Cancellation
CANCEL_REASON_MIN_LENGTH = 10
CANCEL_REASON_MAX_LENGTH = 500

# Hedge coverage bands (percent)
FULLY_HEDGED_THRESHOLD = Decimal("100")
PARTIALLY_HEDGED_THRESHOLD = Decimal("50")
