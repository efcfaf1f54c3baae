"""
Domain events for the invoice workflow.

Immutable event objects published after the Invoice API confirms a change.
Events carry the server's invoice record so handlers never act on a stale
local copy.

Event Categories:
- InvoiceEvent: Invoice lifecycle (create, update, issue, cancel)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for all domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)
    actor_id: str | None = None


@dataclass(frozen=True)
class InvoiceEvent(DomainEvent):
    """Events related to invoice lifecycle."""
    invoice: Any = None  # Invoice, kept as Any to avoid a models import here


@dataclass(frozen=True)
class InvoiceCreated(InvoiceEvent):
    """A draft invoice was created."""

    @classmethod
    def create(cls, invoice: Any, actor_id: str | None = None) -> "InvoiceCreated":
        return cls(invoice=invoice, actor_id=actor_id)


@dataclass(frozen=True)
class InvoiceUpdated(InvoiceEvent):
    """A draft invoice's dates or line items changed."""

    @classmethod
    def create(cls, invoice: Any, actor_id: str | None = None) -> "InvoiceUpdated":
        return cls(invoice=invoice, actor_id=actor_id)


@dataclass(frozen=True)
class InvoiceIssued(InvoiceEvent):
    """Invoice was issued; exposure now exists for its amount."""

    @classmethod
    def create(cls, invoice: Any, actor_id: str | None = None) -> "InvoiceIssued":
        return cls(invoice=invoice, actor_id=actor_id)


@dataclass(frozen=True)
class InvoiceCancelled(InvoiceEvent):
    """Draft invoice was cancelled."""
    reason: str = ""

    @classmethod
    def create(cls, invoice: Any, reason: str, actor_id: str | None = None) -> "InvoiceCancelled":
        return cls(invoice=invoice, reason=reason, actor_id=actor_id)
