"""
Registry tokens agreed across modules. Use these instead of bare strings.

    container.get(TOKENS.infra.logger)
    container.set(TOKENS.services.leagues, service)
"""

from __future__ import annotations

from types import SimpleNamespace


class _Namespace(SimpleNamespace):
    """Read-only attribute bag."""

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"Token namespace is read-only: {name}")


def _ns(**tokens: str) -> _Namespace:
    ns = _Namespace()
    ns.__dict__.update(tokens)
    return ns


TOKENS = _ns(
    infra=_ns(
        config="config",
        database="database",
        cache="cache",
        logger="logger",
    ),
    models=_ns(
        league="models.League",
    ),
    services=_ns(
        api_football="services.apiFootball",
        leagues="services.leagues",
    ),
)

REQUIRED_INFRA_TOKENS = (
    TOKENS.infra.config,
    TOKENS.infra.database,
    TOKENS.infra.cache,
    TOKENS.infra.logger,
)
