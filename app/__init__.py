"""KickOffHub application core: registry, module loading, routing, tasks, host app."""
