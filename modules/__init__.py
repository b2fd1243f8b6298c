"""
Feature modules. MODULE_REGISTRY is the ordered list the loader runs; order decides
route-mount precedence and task order. api_football comes first because other modules
resolve its client from the container.
"""

from __future__ import annotations

from app.manifest import ModuleRegistration
from modules import api_football, football, leagues

MODULE_REGISTRY: tuple[ModuleRegistration, ...] = (
    ModuleRegistration("api_football", api_football.register),
    ModuleRegistration("leagues", leagues.register),
    ModuleRegistration("football", football.register),
)

__all__ = ["MODULE_REGISTRY"]
