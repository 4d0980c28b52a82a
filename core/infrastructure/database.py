"""
Database utilities and transaction management.
"""

from typing import Any, Callable, TypeVar

from asgiref.sync import sync_to_async
from django.db import transaction

T = TypeVar("T")


async def run_atomic(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a synchronous unit of work inside one database transaction.

    The ORM cannot be used from the event loop, so the whole unit of work
    runs on the thread that owns the connection and commits (or rolls
    back) before control returns.

    Usage:
        result = await run_atomic(apply_changes, event)

    Args:
        func: Synchronous callable doing the database work
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Whatever func returns
    """

    def _atomic() -> T:
        with transaction.atomic():
            return func(*args, **kwargs)

    return await sync_to_async(_atomic)()
