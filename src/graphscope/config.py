"""
Inspector configuration.

Holds the host-runtime-specific knobs of the inspection engine: which keys are
reserved, which types count as opaque scalars, which host types act as binding
contexts, and how often refresh passes may run.

A process-wide default is kept at module level so hosts can configure the
engine once at startup:

    >>> from graphscope.config import InspectorConfig, set_default_config
    >>> set_default_config(InspectorConfig(reserved_prefix="$"))
"""

import datetime
import enum
import pathlib
import uuid
from dataclasses import dataclass, replace
from typing import FrozenSet, Optional, Tuple


DEFAULT_SCALAR_TYPES: Tuple[type, ...] = (
    bytes,
    bytearray,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    enum.Enum,
    pathlib.PurePath,
    uuid.UUID,
)


@dataclass(frozen=True)
class InspectorConfig:
    """Configuration for one inspection session.

    Attributes:
        reserved_prefix: Keys starting with this marker are never enumerated.
        hidden_keys: Exact key names that are never enumerated (self-references).
        hide_invocables: Mark callable-valued nodes hidden.
        scalar_types: Opaque value types shown as string leaves.
        context_types: Extra host types treated as binding contexts.
        refresh_interval: Minimum seconds between two refresh passes.
        expand_root: Open the root wrapper on initialize().
        coerce_literals: Parse edited text as a Python literal when possible.
        root_key: Key given to the root wrapper.
        child_scope_prefix: Prefix of the virtual keys naming nested contexts.
    """
    reserved_prefix: str = "_"
    hidden_keys: FrozenSet[str] = frozenset({"self", "this"})
    hide_invocables: bool = True
    scalar_types: Tuple[type, ...] = DEFAULT_SCALAR_TYPES
    context_types: Tuple[type, ...] = ()
    refresh_interval: float = 0.5
    expand_root: bool = True
    coerce_literals: bool = False
    root_key: str = "root"
    child_scope_prefix: str = "scope-"

    def with_overrides(self, **changes) -> 'InspectorConfig':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


_default_config: Optional[InspectorConfig] = None


def set_default_config(config: InspectorConfig) -> None:
    """Set the config used by engines constructed without an explicit one."""
    global _default_config
    _default_config = config


def get_default_config() -> InspectorConfig:
    """Get the process-wide default config, creating it on first use."""
    global _default_config
    if _default_config is None:
        _default_config = InspectorConfig()
    return _default_config


def reset_default_config() -> None:
    """Drop any configured default (mainly for tests)."""
    global _default_config
    _default_config = None
