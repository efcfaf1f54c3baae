"""
Role-based permission gate for invoice actions.

One capability table maps each role to what it may do. Every predicate reads
that table; none of them compare role names directly. The predicates are
pure and advisory for the UI. The Invoice API repeats the same checks.
"""

from enum import Enum

from core.models.invoice import Invoice, InvoiceStatus


class Role(str, Enum):
    """Company-level user role supplied by the identity provider."""

    ADMIN = "ADMIN"
    FINANCE = "FINANCE"
    AUDITOR = "AUDITOR"

    @classmethod
    def parse(cls, value: "Role | str | None") -> "Role | None":
        """Lenient conversion: unknown or missing roles become None (no capabilities)."""
        if value is None or isinstance(value, Role):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.value.title()


class Capability(str, Enum):
    """Invoice actions a role may be granted."""

    VIEW = "invoices.view"
    CREATE = "invoices.create"
    EDIT = "invoices.edit"
    ISSUE = "invoices.issue"
    CANCEL = "invoices.cancel"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.FINANCE: frozenset({Capability.VIEW, Capability.CREATE, Capability.EDIT}),
    Role.AUDITOR: frozenset({Capability.VIEW}),
}


def capabilities_for(role: Role | str | None) -> frozenset[Capability]:
    """All capabilities granted to a role. Empty for unknown or missing roles."""
    parsed = Role.parse(role)
    if parsed is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(parsed, frozenset())


def has_capability(role: Role | str | None, capability: Capability) -> bool:
    return capability in capabilities_for(role)


def _draft_action_allowed(role: Role | str | None, invoice: Invoice | None, capability: Capability) -> bool:
    if not has_capability(role, capability):
        return False
    if invoice is None:
        return False
    return invoice.status == InvoiceStatus.DRAFT


def can_view_invoices(role: Role | str | None) -> bool:
    return has_capability(role, Capability.VIEW)


def can_create_invoice(role: Role | str | None) -> bool:
    return has_capability(role, Capability.CREATE)


def can_edit_invoice(role: Role | str | None, invoice: Invoice | None) -> bool:
    """Editable only while DRAFT, and only for roles with edit capability."""
    return _draft_action_allowed(role, invoice, Capability.EDIT)


def can_issue_invoice(role: Role | str | None, invoice: Invoice | None) -> bool:
    """Issuing requires the elevated issue capability and a DRAFT invoice."""
    return _draft_action_allowed(role, invoice, Capability.ISSUE)


def can_cancel_invoice(role: Role | str | None, invoice: Invoice | None) -> bool:
    """
    Cancelling requires the elevated cancel capability and a DRAFT invoice.

    Issued, paid, settled and already-cancelled invoices can never be cancelled here.
    """
    return _draft_action_allowed(role, invoice, Capability.CANCEL)
