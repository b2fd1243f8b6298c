"""
Task runner for background work contributed by modules.
Tasks run sequentially after the HTTP surface is assembled; start_module_tasks() wraps the
run in a supervised asyncio.Task so a failing task is logged instead of crashing the server.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Iterable

from app.manifest import ModuleManifest, ModuleTask

logger = logging.getLogger(__name__)


def collect_tasks(manifests: Iterable[ModuleManifest | None]) -> list[ModuleTask]:
    """Flatten tasks in manifest order, then within-manifest order."""
    tasks: list[ModuleTask] = []
    for manifest in manifests:
        if manifest:
            tasks.extend(manifest.tasks or ())
    return tasks


async def run_module_tasks(manifests: Iterable[ModuleManifest | None]) -> int:
    """
    Await every module task in order. Non-callable entries are skipped.
    A task that raises aborts the remaining tasks and propagates.

    Returns:
        Number of tasks executed
    """
    executed = 0
    for task in collect_tasks(manifests):
        if not callable(task):
            logger.debug("Skipping non-callable module task %r", task)
            continue
        await task()
        executed += 1
    return executed


def start_module_tasks(
    manifests: Iterable[ModuleManifest | None],
    *,
    on_error: Callable[[BaseException], Any] | None = None,
) -> asyncio.Task:
    """
    Spawn run_module_tasks on the running loop and return the handle.
    Failures are logged and passed to on_error; they never propagate to the loop.
    Must be called from within a running event loop.
    """
    manifests = list(manifests)

    async def _supervised() -> int:
        try:
            count = await run_module_tasks(manifests)
        except asyncio.CancelledError:
            logger.info("Module tasks cancelled")
            raise
        except Exception as e:
            logger.exception("Module tasks failed: %s", e)
            if on_error is not None:
                on_error(e)
            return -1
        logger.info("Module tasks completed (%d run)", count)
        return count

    return asyncio.get_running_loop().create_task(
        _supervised(), name="kickoffhub-module-tasks"
    )
