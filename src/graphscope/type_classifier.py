"""
Value classification for the inspection tree.

Maps any value of the host object graph to a primitive type tag and a coarse
class. The tag drives display labels, the class drives child ordering and the
interaction policy (collections toggle, primitives edit, invocables hide).
"""

from collections.abc import Mapping, Sequence, Set
from enum import Enum
from numbers import Number
from typing import Any, Dict, Tuple

from graphscope.config import DEFAULT_SCALAR_TYPES


class _Undefined:
    """Marker for an absent value, distinct from ``None``."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


class ValueType(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    UNDEFINED = "undefined"
    MAP = "container-map"
    LIST = "container-list"
    INVOCABLE = "invocable"


class ValueClass(Enum):
    PRIMITIVE = "primitive"
    COLLECTION = "collection"
    INVOCABLE = "invocable"


VALUE_CLASS: Dict[ValueType, ValueClass] = {
    ValueType.STRING: ValueClass.PRIMITIVE,
    ValueType.NUMBER: ValueClass.PRIMITIVE,
    ValueType.BOOLEAN: ValueClass.PRIMITIVE,
    ValueType.NULL: ValueClass.PRIMITIVE,
    ValueType.UNDEFINED: ValueClass.PRIMITIVE,
    ValueType.MAP: ValueClass.COLLECTION,
    ValueType.LIST: ValueClass.COLLECTION,
    ValueType.INVOCABLE: ValueClass.INVOCABLE,
}

# Display priority: primitives first, invocables last
CLASS_PRIORITY: Dict[ValueClass, int] = {
    ValueClass.PRIMITIVE: 0,
    ValueClass.COLLECTION: 1,
    ValueClass.INVOCABLE: 2,
}


def value_type(value: Any, scalar_types: Tuple[type, ...] = DEFAULT_SCALAR_TYPES) -> ValueType:
    """Return the primitive type tag of ``value``.

    bool is checked before Number since ``True`` is an int.
    """
    if value is UNDEFINED:
        return ValueType.UNDEFINED
    if value is None:
        return ValueType.NULL
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, Number):
        return ValueType.NUMBER
    if isinstance(value, str) or isinstance(value, scalar_types):
        return ValueType.STRING
    if isinstance(value, Mapping):
        return ValueType.MAP
    if isinstance(value, (Sequence, Set)):
        return ValueType.LIST
    if callable(value):
        return ValueType.INVOCABLE
    return ValueType.MAP


def classify(value: Any, scalar_types: Tuple[type, ...] = DEFAULT_SCALAR_TYPES) -> Tuple[ValueType, ValueClass]:
    """Classify ``value`` into ``(ValueType, ValueClass)``. Total, never raises."""
    vtype = value_type(value, scalar_types)
    return vtype, VALUE_CLASS[vtype]


def is_container(value: Any, scalar_types: Tuple[type, ...] = DEFAULT_SCALAR_TYPES) -> bool:
    """True for values with onward identity (collections and invocables)."""
    return classify(value, scalar_types)[1] is not ValueClass.PRIMITIVE
