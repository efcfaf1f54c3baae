"""Tests for user identity and role context propagation."""

import pytest

from core.permissions import Role
from utils.user_context import (
    clear_current_user,
    get_current_role,
    get_current_user_id,
    set_current_user,
    user_context,
)


class TestUserContext:

    def test_no_context_raises(self):
        with pytest.raises(RuntimeError, match="No user context set"):
            get_current_user_id()

    def test_no_context_has_no_role(self):
        assert get_current_role() is None

    def test_set_and_clear(self):
        set_current_user("user-1", "finance")

        assert get_current_user_id() == "user-1"
        assert get_current_role() is Role.FINANCE

        clear_current_user()
        assert get_current_role() is None

    def test_unknown_role_has_no_capabilities(self):
        set_current_user("user-1", "SUPERUSER")
        assert get_current_role() is None

    def test_context_manager_restores_previous(self):
        set_current_user("outer", Role.AUDITOR)

        with user_context("inner", Role.ADMIN):
            assert get_current_user_id() == "inner"
            assert get_current_role() is Role.ADMIN

        assert get_current_user_id() == "outer"
        assert get_current_role() is Role.AUDITOR

    def test_context_manager_restores_on_error(self):
        with pytest.raises(ValueError):
            with user_context("user-1", Role.ADMIN):
                raise ValueError("boom")

        assert get_current_role() is None
