"""
Forex exposure and hedge coverage for issued invoices.

The exposure/hedging subsystem owns the numbers; this module only derives
coverage from them. Over-hedging (hedged > exposed) is reported as-is with a
negative unhedged amount rather than clamped, since it points at an upstream
data problem.
"""

import logging
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel

from core.constants import FULLY_HEDGED_THRESHOLD, PARTIALLY_HEDGED_THRESHOLD
from core.models.invoice import Invoice, EXPOSURE_STATUSES
from core.numeric import ZERO, add, round_to_decimal

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


class CoverageBand(str, Enum):
    """Hedge coverage band. Values are the display labels."""

    FULLY_HEDGED = "Fully Hedged"
    PARTIALLY_HEDGED = "Partially Hedged"
    AT_RISK = "At Risk"


class ExposureCoverage(BaseModel):
    """Coverage summary for the exposure panel."""

    currency: str
    exposed_amount: Decimal
    hedged_amount: Decimal
    unhedged_amount: Decimal
    hedge_percentage: Decimal
    band: CoverageBand

    @property
    def label(self) -> str:
        return self.band.value

    @property
    def is_over_hedged(self) -> bool:
        return self.unhedged_amount < 0

    @property
    def display_percentage(self) -> Decimal:
        """Percentage rounded to one decimal place for display."""
        return round_to_decimal(self.hedge_percentage, 1)


def has_exposure(invoice: Invoice | None) -> bool:
    """True iff the invoice has been issued (and not cancelled)."""
    if invoice is None:
        return False
    return invoice.status in EXPOSURE_STATUSES


def unhedged_amount(exposed_amount: Decimal, hedged_amount: Decimal = ZERO) -> Decimal:
    return add(exposed_amount, hedged_amount.copy_negate())


def hedge_percentage(exposed_amount: Decimal, hedged_amount: Decimal = ZERO) -> Decimal:
    """
    Hedged share of the exposure as a percentage.

    Zero when nothing is exposed. Not rounded, so band comparisons are exact.
    """
    if exposed_amount == 0:
        return ZERO
    return hedged_amount / exposed_amount * HUNDRED


def coverage_band(percentage: Decimal) -> CoverageBand:
    if percentage >= FULLY_HEDGED_THRESHOLD:
        return CoverageBand.FULLY_HEDGED
    if percentage >= PARTIALLY_HEDGED_THRESHOLD:
        return CoverageBand.PARTIALLY_HEDGED
    return CoverageBand.AT_RISK


def coverage_label(percentage: Decimal) -> str:
    return coverage_band(percentage).value


def calculate_coverage(invoice: Invoice) -> ExposureCoverage | None:
    """
    Coverage for an issued invoice, or None if it has no exposure.

    Exposed amount falls back to the invoice amount and hedged amount to
    zero while the exposure subsystem has not populated them yet.
    """
    if not has_exposure(invoice):
        return None

    exposed = invoice.exposed_amount if invoice.exposed_amount is not None else invoice.invoice_amount
    hedged = invoice.hedged_amount if invoice.hedged_amount is not None else ZERO
    unhedged = unhedged_amount(exposed, hedged)
    percentage = hedge_percentage(exposed, hedged)

    if unhedged < 0:
        logger.warning(
            "Invoice %s is over-hedged: hedged %s exceeds exposed %s",
            invoice.invoice_number, hedged, exposed,
        )

    return ExposureCoverage(
        currency=invoice.currency,
        exposed_amount=exposed,
        hedged_amount=hedged,
        unhedged_amount=unhedged,
        hedge_percentage=percentage,
        band=coverage_band(percentage),
    )
