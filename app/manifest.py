"""
Module manifest types: what a feature module's register() returns.

RouteContribution is one of SingleRoutes, SplitRoutes or NoRoutes; the router composer
switches on the variant type rather than on which attributes happen to be set.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, NamedTuple, Union

from fastapi import APIRouter

ModuleTask = Callable[[], Awaitable[Any]]


class SingleRoutes(NamedTuple):
    """One router for every endpoint of the module."""

    router: APIRouter


class SplitRoutes(NamedTuple):
    """Public (no auth) and private (auth enforced inside the router) route groups."""

    public: APIRouter | None = None
    private: APIRouter | None = None


class NoRoutes(NamedTuple):
    """Module has no HTTP surface (e.g. it only exposes a public API)."""


RouteContribution = Union[SingleRoutes, SplitRoutes, NoRoutes]


class ModuleManifest(NamedTuple):
    """Immutable description of a loaded module."""

    name: str
    base_path: str | None = None
    routes: RouteContribution = NoRoutes()
    tasks: tuple[ModuleTask, ...] = ()
    public_api: Any = None


class ModuleRegistration(NamedTuple):
    """Entry in the static module list: name plus its async register(container) factory."""

    name: str
    register: Callable[[Any], Awaitable[ModuleManifest]]
