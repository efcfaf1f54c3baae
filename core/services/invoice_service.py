"""
Invoice service: the seam between editor actions and the Invoice API.

Every mutation runs the same sequence:
1. permission check for the current role (advisory; the API re-checks)
2. lifecycle precondition on the invoice the caller holds
3. local validation, so invalid forms never reach the network
4. in-flight guard, so a second click doesn't double-submit
5. re-check of the precondition against the newest record this service has seen
6. API call, then publish a domain event with the server's record

Issue and cancel are irreversible and are never retried automatically. A
timeout leaves the outcome unknown, so the next attempt for that invoice
needs confirm_retry=True.
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum

from clients.invoice_api_client import InvoiceApiClient
from core.event_bus import EventBus
from core.events import InvoiceCancelled, InvoiceCreated, InvoiceIssued, InvoiceUpdated
from core.exceptions import (
    ActionInFlightError,
    InvoiceApiTimeoutError,
    InvoiceConflictError,
    InvoiceValidationError,
    PermissionDeniedError,
    RetryConfirmationRequiredError,
    UnsavedChangesError,
)
from core.lifecycle import ensure_editable, ensure_transition, observe_status_change
from core.models import CancelInvoiceRequest, Invoice, InvoiceFilters, InvoiceFormData, InvoicePage, InvoiceStatus
from core.permissions import Capability, has_capability
from core.validation import (
    build_create_request,
    build_update_request,
    validate_cancel_reason,
    validate_invoice_form,
)
from utils.user_context import get_current_role, get_current_user_id

logger = logging.getLogger(__name__)


class InvoiceAction(str, Enum):
    """Mutations tracked by the in-flight guard."""

    CREATE = "create"
    UPDATE = "update"
    ISSUE = "issue"
    CANCEL = "cancel"


class InvoiceService:
    """Service for invoice workflow operations."""

    def __init__(self, api: InvoiceApiClient, event_bus: EventBus):
        self.api = api
        self.event_bus = event_bus
        self._lock = threading.Lock()
        self._in_flight: set[tuple[str, InvoiceAction]] = set()
        self._unconfirmed: dict[str, InvoiceAction] = {}
        self._latest: dict[str, Invoice] = {}

    # -------------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------------

    def _require(self, capability: Capability, action: str) -> None:
        role = get_current_role()
        if not has_capability(role, capability):
            logger.warning(f"Role {role.value if role else None} denied: {action}")
            raise PermissionDeniedError(f"Role {role.value if role else 'none'} cannot {action}")

    def is_in_flight(self, key: str, action: InvoiceAction) -> bool:
        """Whether an action is currently being submitted (invoice id, or trade id for create)."""
        with self._lock:
            return (key, action) in self._in_flight

    def pending_confirmation(self, invoice_id: str) -> InvoiceAction | None:
        """Issue/cancel whose last attempt timed out and has not been confirmed since."""
        with self._lock:
            return self._unconfirmed.get(invoice_id)

    @contextmanager
    def _submitting(self, key: str, action: InvoiceAction):
        with self._lock:
            if (key, action) in self._in_flight:
                raise ActionInFlightError(f"{action.value} already in progress for {key}")
            self._in_flight.add((key, action))
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard((key, action))

    def _check_retry(self, invoice_id: str, action: InvoiceAction, confirm_retry: bool) -> None:
        if self.pending_confirmation(invoice_id) == action and not confirm_retry:
            raise RetryConfirmationRequiredError(
                f"Previous {action.value} of invoice {invoice_id} timed out; confirmation required"
            )

    def _known_copies(self, invoice: Invoice) -> list[Invoice]:
        """The caller's copy plus the newest one this service has seen."""
        with self._lock:
            latest = self._latest.get(invoice.id)
        return [invoice] if latest is None else [invoice, latest]

    def _remember(self, invoice: Invoice) -> Invoice:
        with self._lock:
            previous = self._latest.get(invoice.id)
            self._latest[invoice.id] = invoice
            if invoice.status != InvoiceStatus.DRAFT:
                self._unconfirmed.pop(invoice.id, None)
        if previous is not None:
            observe_status_change(previous, invoice)
        return invoice

    def _submit_transition(self, invoice: Invoice, action: InvoiceAction, call):
        """Run an irreversible API call, recording timeouts for confirm-before-retry."""
        try:
            result = call()
        except InvoiceApiTimeoutError:
            with self._lock:
                self._unconfirmed[invoice.id] = action
            logger.error(f"Invoice {invoice.invoice_number} {action.value} timed out; outcome unknown")
            raise
        except InvoiceConflictError:
            logger.warning(f"Invoice {invoice.invoice_number} {action.value} rejected: modified elsewhere")
            raise

        with self._lock:
            self._unconfirmed.pop(invoice.id, None)
        return self._remember(result)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, invoice_id: str) -> Invoice:
        """
        Fetch the authoritative record.

        Raises:
            PermissionDeniedError: If the role cannot view invoices
            InvoiceNotFoundError: If the invoice doesn't exist
        """
        self._require(Capability.VIEW, "view invoices")
        return self._remember(self.api.get_invoice(invoice_id))

    def list_invoices(self, filters: InvoiceFilters | None = None) -> InvoicePage:
        self._require(Capability.VIEW, "view invoices")
        page = self.api.list_invoices(filters)
        for invoice in page.invoices:
            self._remember(invoice)
        return page

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create(self, form: InvoiceFormData) -> Invoice:
        """
        Create a DRAFT invoice from the editor form.

        Args:
            form: Form state including raw line item strings

        Returns:
            Server record with authoritative totals

        Raises:
            PermissionDeniedError: If the role cannot create invoices
            InvoiceValidationError: If the form has errors (nothing is sent)
            ActionInFlightError: If a create for this trade is already pending
        """
        self._require(Capability.CREATE, "create invoices")

        errors = validate_invoice_form(form)
        if errors:
            raise InvoiceValidationError(errors)

        request = build_create_request(form)
        with self._submitting(request.trade_id, InvoiceAction.CREATE):
            invoice = self._remember(self.api.create_invoice(request))

        logger.info(f"Invoice {invoice.invoice_number} created for trade {invoice.trade_id}")
        self.event_bus.publish(InvoiceCreated.create(invoice, actor_id=get_current_user_id()))
        return invoice

    def update(self, invoice: Invoice, form: InvoiceFormData) -> Invoice:
        """
        Save edits to a DRAFT invoice.

        Raises:
            PermissionDeniedError: If the role cannot edit invoices
            InvalidTransitionError: If the invoice is no longer DRAFT
            InvoiceValidationError: If the form has errors
        """
        self._require(Capability.EDIT, "edit invoices")
        ensure_editable(invoice)

        errors = validate_invoice_form(form)
        if errors:
            raise InvoiceValidationError(errors)

        request = build_update_request(invoice.id, form)
        with self._submitting(invoice.id, InvoiceAction.UPDATE):
            for copy in self._known_copies(invoice):
                ensure_editable(copy)
            updated = self._remember(self.api.update_invoice(request))

        logger.info(f"Invoice {updated.invoice_number} updated")
        self.event_bus.publish(InvoiceUpdated.create(updated, actor_id=get_current_user_id()))
        return updated

    def issue(self, invoice: Invoice, is_dirty: bool = False, confirm_retry: bool = False) -> Invoice:
        """
        Issue a DRAFT invoice (irreversible; creates forex exposure).

        Args:
            invoice: Invoice as currently displayed
            is_dirty: Whether the editor holds unsaved changes
            confirm_retry: User confirmed retrying after a timed-out attempt

        Raises:
            PermissionDeniedError: If the role cannot issue
            InvalidTransitionError: If the invoice is not DRAFT
            UnsavedChangesError: If the form is dirty
            RetryConfirmationRequiredError: If a previous attempt timed out
            ActionInFlightError: If an issue is already pending
        """
        self._require(Capability.ISSUE, "issue invoices")
        ensure_transition(invoice, InvoiceStatus.ISSUED)
        if is_dirty:
            raise UnsavedChangesError(f"Invoice {invoice.invoice_number} has unsaved changes")
        self._check_retry(invoice.id, InvoiceAction.ISSUE, confirm_retry)

        with self._submitting(invoice.id, InvoiceAction.ISSUE):
            for copy in self._known_copies(invoice):
                ensure_transition(copy, InvoiceStatus.ISSUED)
            issued = self._submit_transition(
                invoice, InvoiceAction.ISSUE, lambda: self.api.issue_invoice(invoice.id)
            )

        logger.info(
            f"Invoice {issued.invoice_number} issued; exposure {issued.exposed_amount} {issued.currency}"
        )
        self.event_bus.publish(InvoiceIssued.create(issued, actor_id=get_current_user_id()))
        return issued

    def cancel(self, invoice: Invoice, reason: str, confirm_retry: bool = False) -> Invoice:
        """
        Cancel a DRAFT invoice (irreversible).

        Raises:
            PermissionDeniedError: If the role cannot cancel
            InvalidTransitionError: If the invoice is not DRAFT
            InvoiceValidationError: If the reason is not 10-500 characters
            RetryConfirmationRequiredError: If a previous attempt timed out
            ActionInFlightError: If a cancel is already pending
        """
        self._require(Capability.CANCEL, "cancel invoices")
        ensure_transition(invoice, InvoiceStatus.CANCELLED)

        reason_error = validate_cancel_reason(reason)
        if reason_error:
            raise InvoiceValidationError({"cancel_reason": reason_error})
        self._check_retry(invoice.id, InvoiceAction.CANCEL, confirm_retry)

        request = CancelInvoiceRequest(id=invoice.id, cancel_reason=reason.strip())
        with self._submitting(invoice.id, InvoiceAction.CANCEL):
            for copy in self._known_copies(invoice):
                ensure_transition(copy, InvoiceStatus.CANCELLED)
            cancelled = self._submit_transition(
                invoice, InvoiceAction.CANCEL, lambda: self.api.cancel_invoice(request)
            )

        logger.info(f"Invoice {cancelled.invoice_number} cancelled")
        self.event_bus.publish(
            InvoiceCancelled.create(cancelled, reason=request.cancel_reason, actor_id=get_current_user_id())
        )
        return cancelled
