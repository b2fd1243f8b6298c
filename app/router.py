"""
HTTP router composer: merge module route contributions into one APIRouter.

    router = compose_router(manifests)
    app.include_router(router, prefix="/api")

Split contributions mount public then private routes at the same base path; auth is
enforced by dependencies inside the private router, not here. Overlapping paths resolve
first-match-wins in mount order.
"""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import APIRouter

from app.manifest import ModuleManifest, NoRoutes, SingleRoutes, SplitRoutes

logger = logging.getLogger(__name__)


def mount_prefix(base_path: str | None) -> str:
    """Normalize a manifest base path to an include_router prefix ("/" -> "")."""
    path = (base_path or "/").strip()
    if not path.startswith("/"):
        path = "/" + path
    return path.rstrip("/")


def compose_router(manifests: Iterable[ModuleManifest | None]) -> APIRouter:
    """Build one router from manifests, in order. Falsy manifests are skipped."""
    router = APIRouter()
    for manifest in manifests:
        if not manifest:
            continue
        prefix = mount_prefix(manifest.base_path)
        routes = manifest.routes
        if isinstance(routes, SplitRoutes):
            if routes.public is not None:
                router.include_router(routes.public, prefix=prefix)
            if routes.private is not None:
                router.include_router(routes.private, prefix=prefix)
        elif isinstance(routes, SingleRoutes):
            router.include_router(routes.router, prefix=prefix)
        elif isinstance(routes, NoRoutes) or routes is None:
            logger.debug("Module %s has no HTTP routes", manifest.name)
            continue
        else:
            raise TypeError(
                f"Module {manifest.name}: unsupported route contribution {type(routes).__name__}"
            )
        logger.debug("Mounted module %s at %s", manifest.name, prefix or "/")
    return router
