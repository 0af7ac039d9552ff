"""Row locking helpers shared by the ORM-backed services."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset
