"""
Invoice lifecycle state machine.

    DRAFT ──issue──▶ ISSUED ──payment──▶ PARTIALLY_PAID ──payment──▶ SETTLED
      │                 └──────────────payment──────────────────────▶ SETTLED
      └──cancel──▶ CANCELLED

This core initiates only DRAFT -> ISSUED and DRAFT -> CANCELLED. Payment
transitions are applied by the settlement subsystem and are only observed
here. Both issue and cancel are irreversible.

issue() and cancel() return the locally projected record. The Invoice API
response replaces it as soon as it arrives.
"""

import logging
from datetime import datetime
from decimal import Decimal

from core.exceptions import InvalidTransitionError, InvoiceValidationError
from core.models.invoice import Invoice, InvoiceStatus
from core.validation import validate_cancel_reason

logger = logging.getLogger(__name__)

INITIATED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.ISSUED, InvoiceStatus.CANCELLED}),
}

OBSERVED_TRANSITIONS: dict[InvoiceStatus, frozenset[InvoiceStatus]] = {
    InvoiceStatus.ISSUED: frozenset({InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.SETTLED}),
    InvoiceStatus.PARTIALLY_PAID: frozenset({InvoiceStatus.PARTIALLY_PAID, InvoiceStatus.SETTLED}),
}

_STATUS_LABELS = {
    InvoiceStatus.DRAFT: "Draft",
    InvoiceStatus.ISSUED: "Issued",
    InvoiceStatus.PARTIALLY_PAID: "Partially Paid",
    InvoiceStatus.SETTLED: "Settled",
    InvoiceStatus.CANCELLED: "Cancelled",
}


def status_label(status: InvoiceStatus) -> str:
    return _STATUS_LABELS[status]


def is_legal_transition(source: InvoiceStatus, target: InvoiceStatus, initiated: bool = True) -> bool:
    """
    Whether source -> target is in the graph.

    Args:
        source: Current status
        target: Requested status
        initiated: True for transitions this core starts (issue/cancel),
            False for transitions observed from payment reconciliation
    """
    table = INITIATED_TRANSITIONS if initiated else OBSERVED_TRANSITIONS
    return target in table.get(source, frozenset())


def ensure_transition(invoice: Invoice, target: InvoiceStatus) -> None:
    """
    Reject an initiated transition that is not in the graph.

    Raises:
        InvalidTransitionError: If invoice.status -> target is illegal
    """
    if not is_legal_transition(invoice.status, target):
        raise InvalidTransitionError(
            f"Invoice {invoice.invoice_number} cannot move from "
            f"{invoice.status.value} to {target.value}"
        )


def ensure_editable(invoice: Invoice) -> None:
    """
    Line items and dates can only change while DRAFT.

    Raises:
        InvalidTransitionError: If the invoice is not DRAFT
    """
    if invoice.status != InvoiceStatus.DRAFT:
        raise InvalidTransitionError(
            f"Invoice {invoice.invoice_number} is {invoice.status.value} and cannot be edited"
        )


def is_read_only(invoice: Invoice | None) -> bool:
    if invoice is None:
        return True
    return invoice.status != InvoiceStatus.DRAFT


def is_terminal(invoice: Invoice | None) -> bool:
    if invoice is None:
        return False
    return invoice.status in (InvoiceStatus.CANCELLED, InvoiceStatus.SETTLED)


def can_receive_payment(status: InvoiceStatus) -> bool:
    return status in (InvoiceStatus.ISSUED, InvoiceStatus.PARTIALLY_PAID)


def issue(invoice: Invoice, issued_by: str, issued_at: datetime) -> Invoice:
    """
    Project DRAFT -> ISSUED.

    Line items freeze and the whole invoice amount becomes unhedged exposure.

    Raises:
        InvalidTransitionError: If the invoice is not DRAFT
    """
    ensure_transition(invoice, InvoiceStatus.ISSUED)

    issued = invoice.with_changes(
        status=InvoiceStatus.ISSUED,
        exposed_amount=invoice.invoice_amount,
        hedged_amount=Decimal("0"),
        unhedged_amount=invoice.invoice_amount,
        issued_by=issued_by,
        issued_at=issued_at,
    )
    logger.info(f"Invoice {invoice.invoice_number} issued, exposure {issued.exposed_amount} {invoice.currency}")
    return issued


def cancel(invoice: Invoice, reason: str, cancelled_by: str, cancelled_at: datetime) -> Invoice:
    """
    Project DRAFT -> CANCELLED.

    Raises:
        InvalidTransitionError: If the invoice is not DRAFT
        InvoiceValidationError: If the reason is not 10-500 characters
    """
    ensure_transition(invoice, InvoiceStatus.CANCELLED)

    reason_error = validate_cancel_reason(reason)
    if reason_error:
        raise InvoiceValidationError({"cancel_reason": reason_error})

    cancelled = invoice.with_changes(
        status=InvoiceStatus.CANCELLED,
        cancel_reason=reason.strip(),
        cancelled_by=cancelled_by,
        cancelled_at=cancelled_at,
    )
    logger.info(f"Invoice {invoice.invoice_number} cancelled")
    return cancelled


def observe_status_change(previous: Invoice, current: Invoice) -> bool:
    """
    Check a refreshed record against the transition graph.

    Unexpected jumps are logged, not raised: the server record is
    authoritative and is used either way.

    Returns:
        True if the change (or lack of one) is consistent with the graph.
    """
    if previous.status == current.status:
        return True
    if is_legal_transition(previous.status, current.status):
        return True
    if is_legal_transition(previous.status, current.status, initiated=False):
        return True

    logger.warning(
        f"Invoice {current.invoice_number} moved {previous.status.value} -> "
        f"{current.status.value}, which is not a known transition"
    )
    return False
