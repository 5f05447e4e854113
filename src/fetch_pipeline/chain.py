"""Chain class and flatten() — ordered, nestable groups of middleware."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Any

logger = logging.getLogger("fetch_pipeline.chain")


class Chain:
    """Ordered container of middleware and nested groups.

    A chain is interchangeable with listing its members individually:
    ``Chain(a, Chain(b, c))`` runs as ``a, b, c``.
    """

    def __init__(self, *items: Any) -> None:
        self._items: list[Any] = list(items)
        self._flat: tuple[Any, ...] | None = None

    def add(self, *items: Any) -> Chain:
        self._items.extend(items)
        self._flat = None
        return self

    def flatten(self) -> tuple[Any, ...]:
        if self._flat is None:
            out: list[Any] = []
            Chain._flatten(self._items, out)
            self._flat = tuple(out)
        return self._flat

    def __iter__(self) -> Iterator[Any]:
        return iter(self.flatten())

    def __len__(self) -> int:
        return len(self.flatten())

    def __repr__(self) -> str:
        return f"Chain({', '.join(_name(item) for item in self._items)})"

    @staticmethod
    def _flatten(items: Iterable[Any], out: list[Any]) -> None:
        for item in items:
            if isinstance(item, Chain):
                Chain._flatten(item._items, out)
            elif isinstance(item, (list, tuple)):
                Chain._flatten(item, out)
            else:
                # Anything else is passed through; the pipeline rejects non-callables
                out.append(item)


def flatten(items: Iterable[Any]) -> tuple[Any, ...]:
    """Expand nested groups depth-first, left to right."""
    out: list[Any] = []
    Chain._flatten(items, out)
    logger.debug("Flattened chain into %d middleware", len(out))
    return tuple(out)


def _name(item: Any) -> str:
    if isinstance(item, Chain):
        return repr(item)
    return getattr(item, "__qualname__", None) or type(item).__name__
