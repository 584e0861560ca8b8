"""
Wrapper nodes: the per-(parent, key) proxies the tree is made of.

A wrapper references a live value (never copies it) and carries everything the
renderer needs: classification, label, visibility and the expansion state of
its children. Parents are held weakly; ownership runs from parent to child.
"""

import weakref
from enum import Enum
from typing import Any, Dict, Hashable, List, Optional

from graphscope.type_classifier import CLASS_PRIORITY, ValueClass, ValueType


class ExpansionState(Enum):
    UNEXPANDED = "unexpanded"
    CLOSED = "closed"
    OPEN = "open"


class Wrapper:
    """Tree node proxying one value reached through one parent under one key.

    ``open_children`` and ``closed_children`` are mutually exclusive: both are
    ``None`` until the node is first expanded, afterwards exactly one holds the
    ordered visible children. ``child_index`` keeps every materialized child
    by key, hidden ones included.
    """

    def __init__(self, key: Hashable, value: Any, parent: Optional['Wrapper'] = None):
        self.key = key
        self.value = value
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self.value_type: Optional[ValueType] = None
        self.value_class: Optional[ValueClass] = None
        self.name: str = str(key)
        self.display_label: str = ""
        self.hidden: bool = False
        self.visited_stamp: int = -1
        self.open_children: Optional[List['Wrapper']] = None
        self.closed_children: Optional[List['Wrapper']] = None
        self.child_index: Dict[Hashable, 'Wrapper'] = {}

    def __repr__(self) -> str:
        return f"Wrapper(key={self.key!r}, label={self.display_label!r}, state={self.state.value})"

    @property
    def parent(self) -> Optional['Wrapper']:
        return self._parent_ref() if self._parent_ref is not None else None

    @parent.setter
    def parent(self, parent: Optional['Wrapper']) -> None:
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def state(self) -> ExpansionState:
        if self.open_children is not None:
            return ExpansionState.OPEN
        if self.closed_children is not None:
            return ExpansionState.CLOSED
        return ExpansionState.UNEXPANDED

    @property
    def is_open(self) -> bool:
        return self.open_children is not None

    @property
    def children(self) -> List['Wrapper']:
        """Visible children regardless of expansion state (empty if unexpanded)."""
        if self.open_children is not None:
            return self.open_children
        return self.closed_children or []

    def set_children(self, children: List['Wrapper']) -> None:
        """Store ``children`` in whichever sequence matches the current state."""
        if self.open_children is not None:
            self.open_children = children
        else:
            self.closed_children = children

    def clear_children(self) -> None:
        """Return to the unexpanded state (value is no longer a collection)."""
        self.open_children = None
        self.closed_children = None
        self.child_index = {}

    def key_path(self) -> List[Hashable]:
        """Keys from the root's child down to this node."""
        path: List[Hashable] = []
        node: Optional[Wrapper] = self
        while node is not None and node.parent is not None:
            path.append(node.key)
            node = node.parent
        path.reverse()
        return path


def sort_key(node: Wrapper):
    """Primitives, then collections, then invocables; case-insensitive by name."""
    priority = CLASS_PRIORITY.get(node.value_class, len(CLASS_PRIORITY))
    return priority, node.name.lower()


def order_children(nodes: List[Wrapper]) -> List[Wrapper]:
    return sorted(nodes, key=sort_key)
