"""Singleton accessors for the calculation services.

The calculators hold no per-quote state, so each `get_*` accessor hands out
one shared instance:

    @service_factory
    def get_markup_resolver() -> MarkupResolverService:
        return MarkupResolverService()

Accessors taking arguments keep one instance per argument combination.
Every wrapped accessor is registered so tests can reset them together.
"""

import functools
import threading
from typing import Any, Callable, Dict, List, Tuple, TypeVar, ParamSpec

P = ParamSpec("P")
T = TypeVar("T")

_registered: List[Callable[..., Any]] = []


def service_factory(func: Callable[P, T]) -> Callable[P, T]:
    """Wrap a service constructor so repeated calls share one instance.

    Args:
        func: Accessor that builds the service

    Returns:
        Accessor returning the cached instance for its arguments
    """
    instances: Dict[Tuple, Any] = {}
    lock = threading.Lock()

    @functools.wraps(func)
    def get_instance(*args: P.args, **kwargs: P.kwargs) -> T:
        key = (args, tuple(sorted(kwargs.items())))
        instance = instances.get(key)
        if instance is None:
            with lock:
                instance = instances.get(key)
                if instance is None:
                    instance = instances[key] = func(*args, **kwargs)
        return instance

    get_instance.clear_cache = instances.clear  # type: ignore[attr-defined]
    _registered.append(get_instance)
    return get_instance


def clear_all_service_caches() -> None:
    """Drop every cached service instance (used between tests)."""
    for accessor in _registered:
        accessor.clear_cache()  # type: ignore[attr-defined]
