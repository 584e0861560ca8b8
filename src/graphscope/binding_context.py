"""
Binding contexts: mutable application state that accepts path-based writes.

The engine never writes to the inspected graph itself. Edits are handed to the
nearest enclosing binding context as a structured key path plus a value, and
the context performs the write and whatever change propagation its host
runtime needs.

``Scope`` is a ready-made context for hosts without one of their own: an
attribute bag with nested child scopes, parent fallback for reads, and
change listeners fired after every commit.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import MutableMapping, MutableSequence
from typing import Any, Callable, Hashable, Iterable, List, Optional, Sequence, Tuple

from graphscope.key_policy import get_key
from graphscope.type_classifier import UNDEFINED

logger = logging.getLogger(__name__)

KeyPath = Sequence[Hashable]


def assign_path(target: Any, path: KeyPath, value: Any) -> None:
    """Write ``value`` at ``path`` below ``target``.

    Intermediate keys are read with the same accessors used for enumeration.
    Assigning ``UNDEFINED`` deletes the final key.

    Raises:
        ValueError: If ``path`` is empty.
        KeyError, IndexError, AttributeError, TypeError: From the host container.
    """
    if not path:
        raise ValueError("Cannot assign to an empty key path")

    container = target
    for key in path[:-1]:
        container = get_key(container, key)

    last = path[-1]
    if isinstance(container, (MutableMapping, MutableSequence)):
        if value is UNDEFINED:
            del container[last]
        else:
            container[last] = value
    elif value is UNDEFINED:
        delattr(container, last)
    else:
        setattr(container, last, value)


class BindingContext(ABC):
    """Host-side mutable state that the resolver can commit edits to."""

    @abstractmethod
    def commit(self, path: KeyPath, value: Any) -> None:
        """Write ``value`` at ``path`` relative to this context and propagate."""

    def child_contexts(self) -> Iterable[Tuple[Hashable, 'BindingContext']]:
        """Yield ``(context_id, context)`` for nested contexts shown in the tree."""
        return ()

    def context_keys(self) -> Optional[Iterable[Hashable]]:
        """Own keys to show in the tree, or ``None`` to enumerate the value as usual."""
        return None


# Bookkeeping attributes every Scope carries; never shown as values
_SCOPE_INTERNALS = frozenset({'_scope_id', '_parent', '_children', '_token', '_change_callbacks'})


class Scope(BindingContext):
    """Attribute-bag binding context with nested child scopes.

    Reads of missing public attributes fall back to the parent scope, so a
    child sees its ancestors' values without owning them (only own attributes
    are enumerated in the tree).

    Names defined on the class itself (``parent``, ``scope_id``, ``commit``,
    ``new_child`` and the other methods) cannot hold values. Passing one to
    the constructor or committing to it raises ``ValueError``.

    Example:
        root = Scope(user={"name": "Amy"})
        root.connect_listener(inspector.on_graph_changed)
        root.commit(["user", "name"], "Bo")
    """

    _id_counter: int = 0

    def __init__(self, parent: Optional['Scope'] = None, **values: Any):
        Scope._id_counter += 1
        self._scope_id = Scope._id_counter
        self._parent = parent
        self._children: List['Scope'] = []
        self._token = 0
        self._change_callbacks: List[Callable[[], None]] = []
        for name, value in values.items():
            self._check_value_name(name)
            setattr(self, name, value)
        if parent is not None:
            parent._children.append(self)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith('_'):
            raise AttributeError(name)
        parent = self.__dict__.get('_parent')
        if parent is None:
            raise AttributeError(f"{type(self).__name__} has no attribute '{name}'")
        return getattr(parent, name)

    def __repr__(self) -> str:
        return f"Scope(id={self._scope_id})"

    @property
    def scope_id(self) -> int:
        return self._scope_id

    @property
    def parent(self) -> Optional['Scope']:
        return self._parent

    def new_child(self, **values: Any) -> 'Scope':
        """Create a nested scope under this one."""
        return type(self)(parent=self, **values)

    def destroy(self) -> None:
        """Detach this scope from its parent."""
        if self._parent is not None and self in self._parent._children:
            self._parent._children.remove(self)
        self._parent = None

    def child_contexts(self) -> Iterable[Tuple[Hashable, 'Scope']]:
        return [(child.scope_id, child) for child in self._children]

    def context_keys(self) -> List[str]:
        return [name for name in vars(self) if name not in _SCOPE_INTERNALS]

    @classmethod
    def _check_value_name(cls, name: Hashable) -> None:
        if isinstance(name, str) and (name in _SCOPE_INTERNALS or hasattr(cls, name)):
            raise ValueError(f"'{name}' is reserved by {cls.__name__} and cannot hold a value")

    # ========== COMMIT AND CHANGE NOTIFICATION ==========

    def commit(self, path: KeyPath, value: Any) -> None:
        """Assign ``value`` at ``path`` and notify listeners up to the root scope."""
        if path:
            self._check_value_name(path[0])
        assign_path(self, path, value)
        self._token += 1
        logger.debug(f"Scope {self._scope_id} committed {list(path)!r} = {value!r}")
        scope: Optional[Scope] = self
        while scope is not None:
            scope._notify_change()
            scope = scope._parent

    def get_token(self) -> int:
        """Number of commits applied to this scope."""
        return self._token

    def connect_listener(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` after every commit on this scope or its descendants."""
        if callback not in self._change_callbacks:
            self._change_callbacks.append(callback)

    def disconnect_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)

    def _notify_change(self) -> None:
        for callback in list(self._change_callbacks):
            try:
                callback()
            except Exception as e:
                logger.warning(f"Scope change listener failed: {e}")
