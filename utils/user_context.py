"""Propagate the current user's identity and role through the call stack using contextvars."""

from contextvars import ContextVar
from contextlib import contextmanager

from core.permissions import Role

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)
_current_role: ContextVar[Role | None] = ContextVar("current_role", default=None)


def get_current_user_id() -> str:
    """
    Get current user ID from context.

    Raises RuntimeError if no user context is set.
    """
    user_id = _current_user_id.get()
    if user_id is None:
        raise RuntimeError(
            "No user context set. This usually means you're calling "
            "user-scoped code outside of an authenticated session."
        )
    return user_id


def get_current_role() -> Role | None:
    """
    Get current user's role from context.

    Returns None when no role is known. Permission checks treat that as
    "no capabilities" rather than failing.
    """
    return _current_role.get()


def set_current_user(user_id: str, role: Role | str | None) -> None:
    """
    Set current user ID and role in context.

    Called by the identity provider integration after it resolves the user.
    """
    _current_user_id.set(user_id)
    _current_role.set(Role.parse(role))


def clear_current_user() -> None:
    """
    Clear user context.

    Must be called in finally block to prevent context leakage.
    """
    _current_user_id.set(None)
    _current_role.set(None)


@contextmanager
def user_context(user_id: str, role: Role | str | None):
    """
    Context manager for temporarily setting user context.

    Example:
        with user_context("user-123", Role.ADMIN):
            invoice_service.issue(invoice)
    """
    previous_user = _current_user_id.get()
    previous_role = _current_role.get()
    set_current_user(user_id, role)
    try:
        yield
    finally:
        _current_user_id.set(previous_user)
        _current_role.set(previous_role)
