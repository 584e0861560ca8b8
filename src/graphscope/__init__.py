"""
Live object-graph inspection engine.

Turns an arbitrary, possibly cyclic, mutable object graph into a lazily
materialized tree of wrapper nodes, keeps that tree in step with the live
graph through throttled refresh passes, and writes edited leaf values back
through the nearest binding context.

Quick Start:
    >>> from graphscope import Inspector, Scope
    >>>
    >>> scope = Scope(user={"name": "Amy"})
    >>> inspector = Inspector()
    >>> root = inspector.initialize(scope)
    >>> inspector.attach(scope)
    >>>
    >>> user = root.open_children[0]
    >>> inspector.toggle(user)
    >>> inspector.edit_commit(user.open_children[0], "Bo")

Architecture:
    type_classifier    value -> (type tag, coarse class)
    wrapper_cache      (value identity, parent, key) -> wrapper side table
    tree_materializer  lazy expand / per-pass refresh of the open frontier
    expansion_state    unexpanded -> open <-> closed toggling
    mutation_resolver  leaf edit -> commit(path, value) on a binding context
    refresh_scheduler  throttles "graph changed" signals into passes
    inspector          session object wiring the above together

Rendering, layout and input handling are left to the host.
"""

from graphscope.config import (
    InspectorConfig,
    set_default_config,
    get_default_config,
    reset_default_config,
)
from graphscope.type_classifier import (
    UNDEFINED,
    ValueType,
    ValueClass,
    classify,
    is_container,
)
from graphscope.key_policy import KeyPolicy, own_keys, get_key
from graphscope.wrapper_node import Wrapper, ExpansionState, sort_key, order_children
from graphscope.wrapper_cache import WrapperCache
from graphscope.tree_materializer import TreeMaterializer
from graphscope.expansion_state import ExpansionStateMachine
from graphscope.binding_context import BindingContext, Scope, assign_path
from graphscope.mutation_resolver import MutationPathResolver, EditResult, EditOutcome
from graphscope.refresh_scheduler import RefreshScheduler
from graphscope.inspector import Inspector

__all__ = [
    # Configuration
    'InspectorConfig',
    'set_default_config',
    'get_default_config',
    'reset_default_config',
    # Classification
    'UNDEFINED',
    'ValueType',
    'ValueClass',
    'classify',
    'is_container',
    # Keys
    'KeyPolicy',
    'own_keys',
    'get_key',
    # Tree
    'Wrapper',
    'ExpansionState',
    'sort_key',
    'order_children',
    'WrapperCache',
    'TreeMaterializer',
    'ExpansionStateMachine',
    # Editing
    'BindingContext',
    'Scope',
    'assign_path',
    'MutationPathResolver',
    'EditResult',
    'EditOutcome',
    # Scheduling
    'RefreshScheduler',
    # Engine
    'Inspector',
]

__version__ = '0.1.0'
__description__ = 'Live object-graph inspection engine with lazy, cycle-safe materialization'
