"""Decorator-based registry of output writers.

Concrete writers register themselves at import time via
``@register_writer("csv")``.  The CLI and pipeline resolve a format name
to a class via ``get_writer("csv")`` — they never import a concrete writer.
"""

from __future__ import annotations

_writer_registry: dict[str, type] = {}


def register_writer(name: str):
    """Class decorator that registers a writer under *name*."""

    def decorator(cls: type) -> type:
        if name in _writer_registry:
            raise ValueError(
                f"Duplicate writer registration: {name!r} is already "
                f"registered to {_writer_registry[name].__name__}"
            )
        _writer_registry[name] = cls
        return cls

    return decorator


def get_writer(name: str) -> type:
    """Return the writer class registered under *name*."""
    try:
        return _writer_registry[name]
    except KeyError:
        available = ", ".join(sorted(_writer_registry)) or "(none)"
        raise KeyError(
            f"Unknown writer {name!r}. Available: {available}"
        ) from None


def list_registered() -> dict[str, str]:
    """Return registered writers as ``{"csv": "CSVWriter", ...}``."""
    return {k: v.__name__ for k, v in sorted(_writer_registry.items())}
