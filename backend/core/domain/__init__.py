"""
core.domain — Shared domain utilities for cross-app service layers.

Modules
-------
exceptions         Domain-specific exceptions that map cleanly to HTTP responses.
exception_handler  DRF ``EXCEPTION_HANDLER`` rendering those exceptions.
transactions       ``select_for_update`` locking and conditional status updates.
access             Role guards and role-scoped queryset selectors.

Usage from any app::

    from core.domain.exceptions import DomainError, InvalidTransition
    from core.domain.transactions import conditional_update
    from core.domain.access import require_role
"""
