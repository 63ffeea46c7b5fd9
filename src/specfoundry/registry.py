"""Accumulating table of expanded complex-type schemas.

One registry describes one API surface: every ``generate`` call that shares
it contributes the complex types it discovers. Entries are never replaced
or removed.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from specfoundry.nodes import ObjectNode

if TYPE_CHECKING:
    from collections.abc import ItemsView, Iterator

__all__ = ["ModelSpecRegistry"]


class ModelSpecRegistry:
    """Map of unique id to :class:`~specfoundry.nodes.ObjectNode`.

    ``register`` and ``get`` are serialised with a re-entrant lock so hosts
    that generate several roots concurrently against one registry observe a
    consistent table.

    Examples
    --------
    >>> registry = ModelSpecRegistry()
    >>> registry.register(ObjectNode(id="Order"))
    True
    >>> registry.register(ObjectNode(id="Order", description="ignored"))
    False
    >>> registry.get("Order").description is None
    True
    """

    def __init__(self) -> None:
        self._specs: dict[str, ObjectNode] = {}
        self._lock = threading.RLock()

    def register(self, node: ObjectNode) -> bool:
        """Store ``node`` unless its id is already present.

        Returns
        -------
        bool
            ``True`` when the node was added, ``False`` for a duplicate id.

        Raises
        ------
        TypeError
            If ``node`` is not an :class:`ObjectNode`.
        """
        if not isinstance(node, ObjectNode):
            msg = f"Only object nodes can be registered, got {type(node).__name__}"
            raise TypeError(msg)
        with self._lock:
            if node.id in self._specs:
                return False
            self._specs[node.id] = node
            return True

    def get(self, spec_id: str) -> ObjectNode | None:
        """Return the node registered under ``spec_id``, if any."""
        with self._lock:
            return self._specs.get(spec_id)

    def ids(self) -> list[str]:
        """Return registered ids in registration order."""
        with self._lock:
            return list(self._specs)

    def items(self) -> ItemsView[str, ObjectNode]:
        """Return a view over a point-in-time copy of the table."""
        return self.snapshot().items()

    def snapshot(self) -> dict[str, ObjectNode]:
        """Return a shallow copy of the table."""
        with self._lock:
            return dict(self._specs)

    def __contains__(self, spec_id: object) -> bool:
        with self._lock:
            return spec_id in self._specs

    def __len__(self) -> int:
        with self._lock:
            return len(self._specs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())
