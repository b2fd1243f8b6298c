"""
Module loader: invoke each registered module's async factory with the container and collect manifests.
Loading is sequential and fail-fast; manifest order follows registration order, which fixes
route-mount precedence and task order downstream.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from app.container import Container
from app.errors import ModuleLoadError
from app.manifest import ModuleManifest, ModuleRegistration, NoRoutes
from sdk.config import get_modules_section

logger = logging.getLogger(__name__)


def _normalize_manifest(manifest: Any, fallback_name: str) -> ModuleManifest:
    """Fill defaults (name, routes, tasks) on a returned manifest."""
    if not isinstance(manifest, ModuleManifest):
        raise ModuleLoadError(
            fallback_name,
            f"register() returned {type(manifest).__name__}, expected ModuleManifest",
        )
    return manifest._replace(
        name=manifest.name or fallback_name,
        routes=manifest.routes if manifest.routes is not None else NoRoutes(),
        tasks=tuple(manifest.tasks or ()),
    )


def enabled_registrations(
    registrations: Iterable[ModuleRegistration], config: dict | None
) -> list[ModuleRegistration]:
    """Drop registrations disabled in config (modules.<name>.enabled: false)."""
    if not config:
        return list(registrations)
    out = []
    for registration in registrations:
        if get_modules_section(config, registration.name)["enabled"]:
            out.append(registration)
        else:
            logger.info("Module %s disabled by config", registration.name)
    return out


async def load_modules(
    container: Container,
    registrations: Iterable[ModuleRegistration] | None = None,
    *,
    config: dict | None = None,
) -> list[ModuleManifest]:
    """
    Load feature modules in order.

    Args:
        container: Registry passed to each module's register()
        registrations: Ordered registrations (defaults to modules.MODULE_REGISTRY)
        config: Optional raw config used to skip disabled modules

    Returns:
        Manifests in registration order

    Raises:
        ModuleLoadError: A factory raised or returned something other than a manifest.
            No partial module set is returned.
    """
    if registrations is None:
        from modules import MODULE_REGISTRY

        registrations = MODULE_REGISTRY

    manifests: list[ModuleManifest] = []
    for registration in enabled_registrations(registrations, config):
        try:
            raw = await registration.register(container)
            manifest = _normalize_manifest(raw, registration.name)
        except ModuleLoadError:
            logger.error("Failed to load module %s", registration.name)
            raise
        except Exception as e:
            logger.exception("Failed to load module %s", registration.name)
            raise ModuleLoadError(registration.name, str(e) or type(e).__name__) from e
        manifests.append(manifest)
        logger.info(
            "Loaded module %s (routes=%s, tasks=%d)",
            manifest.name,
            type(manifest.routes).__name__,
            len(manifest.tasks),
        )
    return manifests
