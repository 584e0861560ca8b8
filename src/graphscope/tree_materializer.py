"""
Tree materializer: builds and re-validates wrapper subtrees from live values.

Two entry points:

- ``refresh(node, pass_id, parent)`` re-validates ``node`` against its value and,
  when the node is open, recurses into its children with the same pass id.
  A node already stamped with ``pass_id`` is skipped, which is what keeps
  shared and cyclic structure from being walked twice in one pass.
- ``expand(node)`` materializes children the first time a node is shown open.

Closed and unexpanded nodes are relabelled but never descended into, so the
cost of a pass is bounded by the open frontier.
"""

import inspect
import logging
from typing import Any, Dict, Hashable, List, Optional

from graphscope.config import InspectorConfig
from graphscope.key_policy import Entry, KeyPolicy
from graphscope.type_classifier import ValueClass, ValueType, classify
from graphscope.wrapper_cache import WrapperCache
from graphscope.wrapper_node import ExpansionState, Wrapper, order_children

logger = logging.getLogger(__name__)


def display_label(vtype: ValueType, value: Any, visible_key_count: int) -> str:
    """Short textual summary of a value for the diagram."""
    if vtype is ValueType.STRING:
        return f'"{value}"'
    if vtype is ValueType.MAP:
        return f"{{ {visible_key_count} }}"
    if vtype is ValueType.LIST:
        return f"[ {visible_key_count} ]"
    if vtype is ValueType.UNDEFINED:
        return "undefined"
    if vtype is ValueType.INVOCABLE:
        return getattr(value, '__qualname__', None) or type(value).__name__
    return str(value)


def node_name(key: Hashable, vtype: ValueType, value: Any) -> str:
    """Key as shown in the diagram; invocables carry their signature."""
    if vtype is not ValueType.INVOCABLE:
        return str(key)
    try:
        signature = str(inspect.signature(value))
    except (TypeError, ValueError):
        signature = "(...)"
    return f"{key}{signature}"


class TreeMaterializer:
    """Materializes wrapper children lazily and re-validates them per pass."""

    def __init__(self, config: InspectorConfig, cache: WrapperCache, policy: Optional[KeyPolicy] = None):
        self._config = config
        self._cache = cache
        self._policy = policy or KeyPolicy(config)
        self._pass_counter = 0

    @property
    def current_pass(self) -> int:
        return self._pass_counter

    def begin_pass(self) -> int:
        """Allocate a new, strictly increasing pass id."""
        self._pass_counter += 1
        return self._pass_counter

    def expand(self, node: Wrapper) -> None:
        """Materialize and open the children of a never-expanded node.

        Already expanded nodes are left in their current state.
        """
        if node.state is not ExpansionState.UNEXPANDED:
            return
        node.open_children = []
        # refresh() drops the sequence again if the value is not a collection
        self.refresh(node, self.begin_pass(), node.parent)

    def refresh(self, node: Wrapper, pass_id: int, parent: Optional[Wrapper] = None) -> None:
        """Re-validate ``node`` against its live value for pass ``pass_id``."""
        if node.visited_stamp == pass_id:
            return
        node.visited_stamp = pass_id
        if parent is not None:
            node.parent = parent

        node.value_type, node.value_class = classify(node.value, self._config.scalar_types)
        entries = self._policy.visible_entries(node.value)
        node.name = node_name(node.key, node.value_type, node.value)
        node.display_label = display_label(node.value_type, node.value, len(entries))
        node.hidden = self._is_hidden(node)

        if node.value_class is not ValueClass.COLLECTION:
            if node.state is not ExpansionState.UNEXPANDED:
                self._discard_children(node, {})
                node.clear_children()
            return

        if node.state is ExpansionState.OPEN:
            self._rebuild_children(node, entries, pass_id)

    def _rebuild_children(self, node: Wrapper, entries: List[Entry], pass_id: int) -> None:
        previous = node.child_index
        index: Dict[Hashable, Wrapper] = {}
        for key, value in entries:
            child = previous.get(key)
            if child is None or child.value is not value:
                child = self._cache.get_or_create(value, key, node)
            index[key] = child
            self.refresh(child, pass_id, node)

        self._discard_children(node, index)
        node.child_index = index
        node.set_children(order_children([c for c in index.values() if not c.hidden]))

    def _discard_children(self, node: Wrapper, keep: Dict[Hashable, Wrapper]) -> None:
        """Drop children no longer exposed under the same key and value."""
        for key, child in node.child_index.items():
            if keep.get(key) is not child:
                self._cache.discard(child)

    def _is_hidden(self, node: Wrapper) -> bool:
        if node.value_class is ValueClass.INVOCABLE and self._config.hide_invocables:
            return True
        return node.parent is not None and self._policy.is_reserved(node.key)
