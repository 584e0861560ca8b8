"""
Expansion state machine for collection nodes.

    UNEXPANDED --toggle--> OPEN
    CLOSED     --toggle--> OPEN      (children re-validated on the way in)
    OPEN       --toggle--> CLOSED    (children kept, not discarded)

Only collection-class nodes change state; toggling anything else is a no-op.
"""

import logging
from typing import Callable, Optional

from graphscope.tree_materializer import TreeMaterializer
from graphscope.type_classifier import ValueClass
from graphscope.wrapper_node import ExpansionState, Wrapper

logger = logging.getLogger(__name__)


class ExpansionStateMachine:
    """Moves nodes between unexpanded, closed and open.

    Args:
        materializer: Used to materialize children on first open and to
                      re-validate a closed subtree when it is reopened.
        on_update: Called with the affected node after every state change,
                   so the renderer can redraw that subtree.
    """

    def __init__(self, materializer: TreeMaterializer, on_update: Optional[Callable[[Wrapper], None]] = None):
        self._materializer = materializer
        self._on_update = on_update

    def toggle(self, node: Wrapper) -> bool:
        """Flip ``node`` between open and closed. Returns False for a no-op."""
        if node.value_class is not ValueClass.COLLECTION:
            return False
        if node.state is ExpansionState.OPEN:
            self._close(node)
        else:
            self._open(node)
        self._schedule_update(node)
        return True

    def open(self, node: Wrapper) -> bool:
        """Open ``node`` if it is a collection that is not open yet."""
        if node.value_class is not ValueClass.COLLECTION or node.is_open:
            return False
        return self.toggle(node)

    def close(self, node: Wrapper) -> bool:
        """Close ``node`` if it is open."""
        if not node.is_open:
            return False
        return self.toggle(node)

    def _open(self, node: Wrapper) -> None:
        if node.state is ExpansionState.UNEXPANDED:
            self._materializer.expand(node)
            logger.debug(f"Expanded {node.name!r} with {len(node.children)} children")
            return
        node.open_children = node.closed_children
        node.closed_children = None
        # Closed subtrees are skipped by refresh passes; catch up before showing
        self._materializer.refresh(node, self._materializer.begin_pass(), node.parent)
        logger.debug(f"Opened {node.name!r}")

    def _close(self, node: Wrapper) -> None:
        node.closed_children = node.open_children
        node.open_children = None
        logger.debug(f"Closed {node.name!r}")

    def _schedule_update(self, node: Wrapper) -> None:
        if self._on_update is not None:
            self._on_update(node)
