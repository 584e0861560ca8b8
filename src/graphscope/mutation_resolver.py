"""
Mutation path resolver: writes edited leaf values back into the live graph.

An edit walks from the leaf towards the root collecting keys until it meets a
wrapper whose value is a binding context. The collected keys, reversed, form
the path handed to that context's ``commit``. No expression text is built or
evaluated; the context performs a structured write.
"""

import ast
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Hashable, List, Optional, Tuple

from graphscope.binding_context import BindingContext
from graphscope.config import InspectorConfig
from graphscope.type_classifier import UNDEFINED, ValueClass, ValueType
from graphscope.wrapper_node import Wrapper

logger = logging.getLogger(__name__)


class EditOutcome(Enum):
    APPLIED = "applied"
    NOT_EDITABLE = "not_editable"
    NO_CONTEXT = "no_context"
    FAILED = "failed"


@dataclass(frozen=True)
class EditResult:
    """What happened to one edit.

    ``path`` and ``value`` are set whenever a context was found; ``error``
    carries the exception raised by a failed commit.
    """
    outcome: EditOutcome
    path: Optional[Tuple[Hashable, ...]] = None
    value: Any = None
    context: Any = None
    error: Optional[BaseException] = None

    @property
    def applied(self) -> bool:
        return self.outcome is EditOutcome.APPLIED


class MutationPathResolver:
    """Resolves edits on primitive leaves to commits on binding contexts."""

    def __init__(self, config: InspectorConfig):
        self._config = config

    def is_binding_context(self, value: Any) -> bool:
        if isinstance(value, BindingContext):
            return True
        return bool(self._config.context_types) and isinstance(value, self._config.context_types)

    def editor_text(self, node: Wrapper) -> Optional[str]:
        """Initial editor contents for ``node``, or None if it cannot be edited."""
        if node.value_class is not ValueClass.PRIMITIVE:
            return None
        if node.value_type in (ValueType.UNDEFINED, ValueType.NULL):
            return ""
        return str(node.value)

    def parse(self, raw_text: str) -> Any:
        """Turn editor text into the value to assign.

        Empty text means "no value" and becomes ``UNDEFINED``. Otherwise the
        text passes through as a string, unless literal coercion is enabled
        and the text is a scalar Python literal.
        """
        if raw_text == "":
            return UNDEFINED
        if self._config.coerce_literals:
            try:
                literal = ast.literal_eval(raw_text)
            except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError):
                return raw_text
            if literal is None or isinstance(literal, (bool, int, float, complex, str)):
                return literal
        return raw_text

    def resolve(self, node: Wrapper) -> Tuple[Optional[Wrapper], List[Hashable]]:
        """Find the nearest enclosing context and the key path from it to ``node``.

        Returns ``(None, keys)`` when no ancestor holds a binding context.
        """
        keys: List[Hashable] = [node.key]
        ancestor = node.parent
        while ancestor is not None:
            if self.is_binding_context(ancestor.value):
                keys.reverse()
                return ancestor, keys
            keys.append(ancestor.key)
            ancestor = ancestor.parent
        return None, keys

    def apply_edit(self, node: Wrapper, raw_text: str) -> EditResult:
        """Commit ``raw_text`` as the new value of leaf ``node``.

        Exactly one commit is issued when an enclosing context exists; none
        otherwise. A commit that raises is reported as FAILED, not re-raised.
        """
        if node.value_class is not ValueClass.PRIMITIVE:
            return EditResult(EditOutcome.NOT_EDITABLE)

        value = self.parse(raw_text)
        owner, keys = self.resolve(node)
        if owner is None:
            logger.debug(f"Edit of {node.name!r} dropped: no enclosing binding context")
            return EditResult(EditOutcome.NO_CONTEXT, value=value)

        path = tuple(keys)
        context = owner.value
        try:
            context.commit(path, value)
        except Exception as e:
            logger.warning(f"Commit of {list(path)!r} on {type(context).__name__} failed: {e}")
            return EditResult(EditOutcome.FAILED, path=path, value=value, context=context, error=e)

        logger.debug(f"Committed {list(path)!r} = {value!r} on {type(context).__name__}")
        return EditResult(EditOutcome.APPLIED, path=path, value=value, context=context)
