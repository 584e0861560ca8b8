"""
Own-key enumeration and filtering.

Everything the engine knows about a value's shape goes through here: which
keys it exposes, how to read a child by key, and which keys are reserved.
The policy never writes to the inspected value.
"""

import logging
from collections.abc import Mapping, Sequence, Set
from typing import Any, Hashable, Iterator, List, Tuple

from graphscope.config import InspectorConfig
from graphscope.type_classifier import ValueType, value_type

logger = logging.getLogger(__name__)

Entry = Tuple[Hashable, Any]


def own_keys(value: Any) -> List[Hashable]:
    """List the enumerable own keys of ``value``.

    Mappings expose their keys, sequences and sets their indices, other objects
    their instance attributes (``__dict__`` plus populated ``__slots__``).
    Class-level attributes are inherited and never listed. A binding context
    that reports its own ``context_keys()`` is enumerated by those instead.
    """
    context_keys = getattr(type(value), 'context_keys', None)
    if callable(context_keys):
        keys = value.context_keys()
        if keys is not None:
            return list(keys)
    if isinstance(value, Mapping):
        return list(value.keys())
    if isinstance(value, (Sequence, Set)):
        return list(range(len(value)))

    keys: List[Hashable] = []
    instance_dict = getattr(value, '__dict__', None)
    if isinstance(instance_dict, Mapping):
        keys.extend(instance_dict.keys())
    for slot in _slot_names(type(value)):
        if slot not in keys and _has_slot_value(value, slot):
            keys.append(slot)
    return keys


def get_key(container: Any, key: Hashable) -> Any:
    """Read ``key`` from ``container`` the way ``own_keys`` enumerated it."""
    if isinstance(container, (Mapping, Sequence)):
        return container[key]
    if isinstance(container, Set):
        # Sets have no positional access; index into iteration order
        for index, item in enumerate(container):
            if index == key:
                return item
        raise IndexError(key)
    return getattr(container, key)


def _is_plain_set(value: Any) -> bool:
    return isinstance(value, Set) and not isinstance(value, (Mapping, Sequence))


def _slot_names(cls: type) -> List[str]:
    names: List[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ('__dict__', '__weakref__') and name not in names:
                names.append(name)
    return names


def _has_slot_value(value: Any, slot: str) -> bool:
    try:
        getattr(value, slot)
    except AttributeError:
        return False
    return True


class KeyPolicy:
    """Decides which keys of a value become children in the tree.

    Args:
        config: Supplies the reserved prefix, the hidden key names and the
                prefix used for virtual child-context keys.
    """

    def __init__(self, config: InspectorConfig):
        self._config = config

    def is_reserved(self, key: Hashable) -> bool:
        """True for keys that must never surface as children."""
        if not isinstance(key, str):
            return False
        if key in self._config.hidden_keys:
            return True
        prefix = self._config.reserved_prefix
        return bool(prefix) and key.startswith(prefix)

    def visible_entries(self, value: Any) -> List[Entry]:
        """Return ``(key, child_value)`` pairs for the visible own keys of ``value``.

        Fail-open: a value that raises while listing keys yields no entries,
        and a key whose read raises is skipped.
        """
        vtype = value_type(value, self._config.scalar_types)
        if vtype not in (ValueType.MAP, ValueType.LIST):
            return []

        try:
            keys = own_keys(value)
            # One iteration for the whole set instead of one per index
            members = list(value) if _is_plain_set(value) else None
        except Exception as e:
            logger.warning(f"Key enumeration failed for {type(value).__name__}: {e}")
            return []

        entries: List[Entry] = []
        for key in keys:
            if self.is_reserved(key):
                continue
            try:
                child = members[key] if members is not None else get_key(value, key)
                entries.append((key, child))
            except Exception as e:
                logger.warning(f"Reading key {key!r} of {type(value).__name__} failed: {e}")
        entries.extend(self._child_context_entries(value))
        return entries

    def _child_context_entries(self, value: Any) -> Iterator[Entry]:
        """Expose nested binding contexts as virtual ``scope-<id>`` keys."""
        child_contexts = getattr(type(value), 'child_contexts', None)
        if child_contexts is None or not callable(child_contexts):
            return
        try:
            children = list(value.child_contexts())
        except Exception as e:
            logger.warning(f"Listing child contexts of {type(value).__name__} failed: {e}")
            return
        for context_id, context in children:
            yield f"{self._config.child_scope_prefix}{context_id}", context
