"""
Identity-keyed side table of wrappers.

Maps each container value (by identity) to the wrappers that currently
reference it, so a value reached again through the same parent and key reuses
its wrapper instead of growing a new subtree. The table lives here, outside
the inspected graph; values are never tagged or modified.
"""

import logging
from typing import Any, Dict, Hashable, List, Optional, Tuple

from graphscope.config import DEFAULT_SCALAR_TYPES
from graphscope.type_classifier import is_container
from graphscope.wrapper_node import Wrapper

logger = logging.getLogger(__name__)


class WrapperCache:
    """Side table ``id(value) -> [wrappers]`` for container values.

    A wrapper holds a strong reference to its value, so a registered identity
    cannot be recycled for a different object while its entry exists.
    Single-threaded: touched only from ``get_or_create`` and ``discard``.
    """

    def __init__(self, scalar_types: Tuple[type, ...] = DEFAULT_SCALAR_TYPES):
        self._scalar_types = scalar_types
        self._table: Dict[int, List[Wrapper]] = {}

    def __len__(self) -> int:
        return sum(len(wrappers) for wrappers in self._table.values())

    def __contains__(self, wrapper: Wrapper) -> bool:
        return any(w is wrapper for w in self._table.get(id(wrapper.value), ()))

    def lookup(self, value: Any) -> List[Wrapper]:
        """Wrappers currently registered against ``value``."""
        return list(self._table.get(id(value), ()))

    def get_or_create(self, value: Any, key: Hashable, parent: Optional[Wrapper]) -> Wrapper:
        """Return the wrapper for ``value`` under ``parent`` at ``key``.

        Primitive values get a fresh, unregistered wrapper every time. Container
        values reuse a registered wrapper with the same parent and key, or
        register a new one.
        """
        if not is_container(value, self._scalar_types):
            return Wrapper(key, value, parent)

        wrappers = self._table.setdefault(id(value), [])
        for wrapper in wrappers:
            if wrapper.parent is parent and wrapper.key == key:
                return wrapper

        wrapper = Wrapper(key, value, parent)
        wrappers.append(wrapper)
        logger.debug(f"Registered wrapper for {type(value).__name__} at key {key!r}")
        return wrapper

    def discard(self, wrapper: Wrapper) -> None:
        """Unregister ``wrapper`` and every wrapper materialized below it."""
        for child in list(wrapper.child_index.values()):
            self.discard(child)

        wrappers = self._table.get(id(wrapper.value))
        if wrappers is None:
            return
        remaining = [w for w in wrappers if w is not wrapper]
        if remaining:
            self._table[id(wrapper.value)] = remaining
        else:
            del self._table[id(wrapper.value)]

    def clear(self) -> None:
        self._table.clear()
