"""Typed exceptions for invoice workflow failures.

Every exception carries a user_message suitable for a single dismissible
banner. Validation errors additionally carry the field-keyed messages to
render inline.
"""


class InvoiceError(Exception):
    """Base class for invoice workflow errors."""

    user_message = "Something went wrong. Please try again."


class InvoiceValidationError(InvoiceError):
    """Form failed local validation. Nothing was submitted."""

    user_message = "Please fix the highlighted fields."

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invoice form has errors in: {fields}")


class PermissionDeniedError(InvoiceError):
    """
    Current role lacks the capability for this action.

    Advisory only: the Invoice API enforces the same rule authoritatively.
    """

    user_message = "You do not have permission to perform this action."


class InvalidTransitionError(InvoiceError):
    """Requested lifecycle transition is not in the transition graph."""

    user_message = "This action is not available for the invoice's current status."


class UnsavedChangesError(InvoiceError):
    """Invoice form has pending edits; they must be saved before issuing."""

    user_message = "Save your changes before issuing the invoice."


class ActionInFlightError(InvoiceError):
    """The same action is already being submitted for this invoice."""

    user_message = "This action is already in progress."


class RetryConfirmationRequiredError(InvoiceError):
    """
    A previous issue/cancel attempt timed out with unknown outcome.

    The transition may already have applied server-side, so retrying needs
    an explicit confirmation from the user.
    """

    user_message = (
        "The previous attempt did not complete. Refresh the invoice to check "
        "its status before trying again."
    )


class InvoiceApiError(InvoiceError):
    """Invoice API request failed (network or server error)."""

    user_message = "Request failed. Please try again."

    def __init__(self, message: str, status_code: int | None = None, correlation_id: str | None = None):
        self.status_code = status_code
        self.correlation_id = correlation_id
        super().__init__(message)


class InvoiceApiTimeoutError(InvoiceApiError):
    """Request timed out. The server may or may not have applied it."""

    user_message = "The request timed out. Refresh to check whether it was applied."


class InvoiceNotFoundError(InvoiceApiError):
    """Invoice does not exist (or is not visible to this user)."""

    user_message = "Invoice not found."


class InvoiceConflictError(InvoiceApiError):
    """Server rejected the transition because the invoice changed underneath us."""

    user_message = "This invoice was modified elsewhere; refresh and retry."
