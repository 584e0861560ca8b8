"""
Inspector: one inspection session over a live object graph.

Owns the wrapper cache, materializer, expansion machine, edit resolver and
refresh scheduler, and exposes the surface a renderer drives:

    >>> inspector = Inspector()
    >>> root = inspector.initialize(app_scope)
    >>> app_scope.connect_listener(inspector.on_graph_changed)
    >>> inspector.toggle(root.open_children[0])
    >>> inspector.edit_commit(leaf, "new value")

Renderers subscribe with ``add_render_listener`` and receive the root of the
subtree to redraw after every pass, toggle or expand.
"""

import logging
import time
from typing import Any, Callable, Iterator, List, Optional, Tuple

from graphscope.config import InspectorConfig, get_default_config
from graphscope.expansion_state import ExpansionStateMachine
from graphscope.key_policy import KeyPolicy
from graphscope.mutation_resolver import EditResult, MutationPathResolver
from graphscope.refresh_scheduler import RefreshScheduler
from graphscope.tree_materializer import TreeMaterializer
from graphscope.wrapper_cache import WrapperCache
from graphscope.wrapper_node import Wrapper

logger = logging.getLogger(__name__)


class Inspector:
    """Inspection engine for a single root value.

    Args:
        config: Session configuration; defaults to the module-level default.
        call_later: Timer hook for trailing refresh passes (see RefreshScheduler).
        clock: Monotonic time source for throttling.
    """

    def __init__(
        self,
        config: Optional[InspectorConfig] = None,
        call_later: Optional[Callable[[float, Callable[[], None]], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or get_default_config()
        self.cache = WrapperCache(self.config.scalar_types)
        self.policy = KeyPolicy(self.config)
        self.materializer = TreeMaterializer(self.config, self.cache, self.policy)
        self.expansion = ExpansionStateMachine(self.materializer, on_update=self._fire_render_listeners)
        self.resolver = MutationPathResolver(self.config)
        self.scheduler = RefreshScheduler(
            self.refresh_now, self.config.refresh_interval, clock=clock, call_later=call_later
        )
        self._root: Optional[Wrapper] = None
        self._render_callbacks: List[Callable[[Wrapper], None]] = []

    @property
    def root(self) -> Wrapper:
        if self._root is None:
            raise ValueError("Inspector has no root; call initialize() first")
        return self._root

    # ========== LIFECYCLE ==========

    def initialize(self, root_value: Any) -> Wrapper:
        """Wrap ``root_value`` and run the first pass. Replaces any previous root."""
        # Every cached wrapper hangs off the old root
        self.cache.clear()
        self.scheduler.cancel()

        root = self.cache.get_or_create(root_value, self.config.root_key, None)
        self._root = root
        if self.config.expand_root:
            self.materializer.expand(root)
        else:
            self.materializer.refresh(root, self.materializer.begin_pass())
        logger.debug(f"Initialized inspector on {type(root_value).__name__}")
        self._fire_render_listeners(root)
        return root

    def attach(self, context: Any) -> None:
        """Subscribe to a context's change listeners (e.g. a ``Scope``)."""
        context.connect_listener(self.on_graph_changed)

    def detach(self, context: Any) -> None:
        context.disconnect_listener(self.on_graph_changed)

    def on_graph_changed(self) -> None:
        """Host signal that the graph may have changed; throttled."""
        if self._root is None:
            return
        self.scheduler.notify()

    def poll(self) -> bool:
        """Run a deferred refresh pass if it is due."""
        return self.scheduler.poll()

    def refresh_now(self) -> int:
        """Run one refresh pass immediately, bypassing the throttle.

        Returns:
            The pass id used.
        """
        root = self.root
        pass_id = self.materializer.begin_pass()
        self.materializer.refresh(root, pass_id)
        logger.debug(f"Refresh pass {pass_id} complete ({len(self.cache)} cached wrappers)")
        self._fire_render_listeners(root)
        return pass_id

    # ========== RENDERER ENTRY POINTS ==========

    def toggle(self, node: Wrapper) -> bool:
        return self.expansion.toggle(node)

    def expand(self, node: Wrapper) -> None:
        """Materialize and open ``node`` if it was never expanded."""
        self.materializer.expand(node)
        self._fire_render_listeners(node)

    def edit_start(self, node: Wrapper) -> Optional[str]:
        return self.resolver.editor_text(node)

    def edit_commit(self, node: Wrapper, text: str) -> EditResult:
        return self.resolver.apply_edit(node, text)

    def visible_nodes(self) -> Iterator[Tuple[int, Wrapper]]:
        """Pre-order ``(depth, node)`` walk of the open frontier."""
        stack: List[Tuple[int, Wrapper]] = [(0, self.root)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            for child in reversed(node.open_children or []):
                stack.append((depth + 1, child))

    def visible_edges(self) -> List[Tuple[Wrapper, Wrapper]]:
        """``(parent, child)`` pairs for every drawn link."""
        return [
            (node, child)
            for _, node in self.visible_nodes()
            for child in (node.open_children or [])
        ]

    # ========== RENDER LISTENERS ==========

    def add_render_listener(self, callback: Callable[[Wrapper], None]) -> None:
        if callback not in self._render_callbacks:
            self._render_callbacks.append(callback)

    def remove_render_listener(self, callback: Callable[[Wrapper], None]) -> None:
        if callback in self._render_callbacks:
            self._render_callbacks.remove(callback)

    def _fire_render_listeners(self, node: Wrapper) -> None:
        for callback in list(self._render_callbacks):
            try:
                callback(node)
            except Exception as e:
                logger.warning(f"Error in render listener: {e}")
