"""Agent registry — butterflies looked up by name.

Agent modules register their class with ``@register_agent("name")``; the
engine resolves the configured name once at the start of a run.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from meadow.agents.base import Butterfly

logger = logging.getLogger(__name__)

B = TypeVar("B", bound="type[Butterfly]")

# Modules whose import registers the bundled agents.
BUILTIN_AGENT_MODULES = ("meadow.agents.explorer",)

_agent_registry: dict[str, type[Butterfly]] = {}


def register_agent(name: str) -> Callable[[B], B]:
    """Decorator to register a butterfly class under ``name``."""

    def decorator(cls: B) -> B:
        if name in _agent_registry and _agent_registry[name] is not cls:
            logger.warning("Agent %r re-registered by %s", name, cls.__name__)
        _agent_registry[name] = cls
        return cls

    return decorator


def _load_builtins() -> None:
    for module in BUILTIN_AGENT_MODULES:
        importlib.import_module(module)


def known_agents() -> list[str]:
    """Names of every registered agent, sorted."""
    _load_builtins()
    return sorted(_agent_registry)


def resolve_agent(name: str) -> type[Butterfly]:
    """Look up an agent class by name.

    Raises:
        KeyError: If no agent is registered under ``name``.
    """
    _load_builtins()
    try:
        return _agent_registry[name]
    except KeyError:
        known = ", ".join(sorted(_agent_registry))
        msg = f"unknown agent {name!r}; known agents: {known}"
        raise KeyError(msg) from None
