"""Utility functions for the Kubernetes infrastructure layer."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a controller coroutine to completion from blocking code.

    ClusterControllerSync routes every cluster call through here. Without a
    running loop the coroutine gets a fresh one; inside a running loop it is
    finished on a fresh loop in a helper thread so the caller's loop is
    never re-entered.
    """
    if not _loop_running():
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="cluster-sync") as pool:
        return pool.submit(asyncio.run, coro).result()


def _loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True
