"""Tests for lazy materialization and per-pass refresh."""
import logging

import pytest

from conftest import CountingMapping, ExplodingMapping, child, keys_of
from graphscope import (
    ExpansionState,
    InspectorConfig,
    TreeMaterializer,
    UNDEFINED,
    ValueClass,
    ValueType,
    WrapperCache,
    order_children,
)
from graphscope.tree_materializer import display_label, node_name


def make_root(value, config=None):
    config = config or InspectorConfig()
    cache = WrapperCache(config.scalar_types)
    materializer = TreeMaterializer(config, cache)
    root = cache.get_or_create(value, "root", None)
    return materializer, cache, root


def shape(node):
    """Label, class and child keys of the whole materialized subtree."""
    return (
        node.display_label,
        node.value_class,
        node.state,
        [(c.key, shape(c)) for c in node.children],
    )


def greet(name, punctuation="!"):
    return f"hi {name}{punctuation}"


def Bravo():
    pass


class TestLabels:

    @pytest.mark.parametrize("vtype, value, count, expected", [
        (ValueType.STRING, "Amy", 0, '"Amy"'),
        (ValueType.MAP, {}, 3, "{ 3 }"),
        (ValueType.LIST, [1, 2], 2, "[ 2 ]"),
        (ValueType.UNDEFINED, UNDEFINED, 0, "undefined"),
        (ValueType.NULL, None, 0, "None"),
        (ValueType.NUMBER, 4.5, 0, "4.5"),
        (ValueType.BOOLEAN, True, 0, "True"),
    ])
    def test_display_label(self, vtype, value, count, expected):
        assert display_label(vtype, value, count) == expected

    def test_invocable_name_carries_signature(self):
        assert node_name("greet", ValueType.INVOCABLE, greet) == "greet(name, punctuation='!')"
        assert display_label(ValueType.INVOCABLE, greet, 0) == "greet"

    def test_map_label_counts_visible_keys_only(self):
        materializer, _, root = make_root({"a": 1, "_hidden": 2, "this": 3})
        materializer.refresh(root, materializer.begin_pass())
        assert root.display_label == "{ 1 }"


class TestExpand:

    def test_expand_opens_and_orders_children(self):
        materializer, _, root = make_root({"name": "Amy", "tags": ["x"], "age": 3})
        materializer.expand(root)

        assert root.state is ExpansionState.OPEN
        assert keys_of(root) == ["age", "name", "tags"]
        assert all(c.parent is root for c in root.open_children)

    def test_unexpanded_root_has_no_children(self):
        materializer, _, root = make_root({"a": {}})
        materializer.refresh(root, materializer.begin_pass())

        assert root.state is ExpansionState.UNEXPANDED
        assert root.open_children is None and root.closed_children is None

    def test_expand_on_primitive_stays_unexpanded(self):
        materializer, _, root = make_root("text")
        materializer.expand(root)
        assert root.state is ExpansionState.UNEXPANDED

    def test_key_path_runs_from_below_root(self):
        materializer, _, root = make_root({"user": {"roles": ["admin"]}})
        materializer.expand(root)
        user = child(root, "user")
        materializer.expand(user)
        roles = child(user, "roles")
        materializer.expand(roles)

        assert root.key_path() == []
        assert roles.key_path() == ["user", "roles"]
        assert child(roles, 0).key_path() == ["user", "roles", 0]

    def test_expand_twice_is_a_no_op(self):
        materializer, _, root = make_root({"a": 1})
        materializer.expand(root)
        children = root.open_children
        materializer.expand(root)
        assert root.open_children is children


class TestRefresh:

    def test_refresh_is_idempotent_on_unchanged_graph(self):
        graph = {"user": {"name": "Amy", "roles": ["admin"]}, "count": 2}
        materializer, _, root = make_root(graph)
        materializer.expand(root)
        materializer.expand(child(root, "user"))

        materializer.refresh(root, materializer.begin_pass())
        first = shape(root)
        materializer.refresh(root, materializer.begin_pass())

        assert shape(root) == first

    def test_same_pass_id_is_not_revisited(self):
        graph = {"a": 1}
        materializer, _, root = make_root(graph)
        materializer.expand(root)
        pass_id = materializer.current_pass

        graph["b"] = 2
        materializer.refresh(root, pass_id)
        assert keys_of(root) == ["a"]

        materializer.refresh(root, materializer.begin_pass())
        assert keys_of(root) == ["a", "b"]

    def test_self_reference_terminates_with_bounded_tree(self):
        a = {"value": 1}
        a["b"] = a
        materializer, cache, root = make_root(a)

        materializer.expand(root)
        cyclic = child(root, "b")

        assert cyclic is not root
        assert cyclic.value is a
        assert cyclic.state is ExpansionState.UNEXPANDED
        assert len(cache) == 2

        materializer.expand(cyclic)
        deeper = child(cyclic, "b")
        assert deeper is not cyclic and deeper is not root
        assert deeper.state is ExpansionState.UNEXPANDED

        materializer.refresh(root, materializer.begin_pass())
        assert len(cache) == 3

    def test_shared_value_gets_one_wrapper_per_parent(self):
        shared = {"x": 1}
        materializer, cache, root = make_root({"p1": {"s": shared}, "p2": {"s": shared}})
        materializer.expand(root)
        materializer.expand(child(root, "p1"))
        materializer.expand(child(root, "p2"))
        via_p1 = child(child(root, "p1"), "s")
        via_p2 = child(child(root, "p2"), "s")

        assert via_p1 is not via_p2
        assert len(cache.lookup(shared)) == 2

        materializer.expand(via_p1)
        materializer.refresh(root, materializer.begin_pass())

        assert via_p1.state is ExpansionState.OPEN
        assert via_p2.state is ExpansionState.UNEXPANDED

    def test_unexpanded_descendants_are_never_read(self):
        stub = CountingMapping({"deep": 1})
        materializer, _, root = make_root({"outer": {"inner": stub}})
        materializer.expand(root)

        for _ in range(3):
            materializer.refresh(root, materializer.begin_pass())

        assert stub.key_reads == 0
        assert stub.item_reads == 0

    def test_closed_descendants_are_not_traversed(self):
        stub = CountingMapping({"deep": 1})
        materializer, _, root = make_root({"outer": {"inner": stub}})
        materializer.expand(root)
        outer = child(root, "outer")
        materializer.expand(outer)
        assert stub.key_reads > 0

        outer.closed_children, outer.open_children = outer.open_children, None
        stub.key_reads = 0
        materializer.refresh(root, materializer.begin_pass())

        assert stub.key_reads == 0

    def test_hidden_children_are_cached_but_not_listed(self):
        config = InspectorConfig(reserved_prefix="$")
        graph = {"$internal": 1, "this": 2, "handler": greet, "value": 3}
        materializer, cache, root = make_root(graph, config)
        materializer.expand(root)

        assert keys_of(root) == ["value"]
        assert "$internal" not in root.child_index
        assert "this" not in root.child_index
        handler = child(root, "handler")
        assert handler.hidden
        assert cache.lookup(greet) == [handler]

    def test_children_sorted_by_class_then_name(self):
        config = InspectorConfig(hide_invocables=False)
        materializer, _, root = make_root({"B": Bravo, "a": [], "Z": "primitive"}, config)
        materializer.expand(root)

        assert keys_of(root) == ["Z", "a", "B"]

    def test_removed_key_is_discarded(self):
        gone = {"x": 1}
        graph = {"kept": {}, "gone": gone}
        materializer, cache, root = make_root(graph)
        materializer.expand(root)

        del graph["gone"]
        materializer.refresh(root, materializer.begin_pass())

        assert keys_of(root) == ["kept"]
        assert cache.lookup(gone) == []

    def test_replaced_value_is_reclassified(self):
        graph = {"v": {"k": 1}}
        materializer, cache, root = make_root(graph)
        materializer.expand(root)
        old = child(root, "v")
        materializer.expand(old)

        graph["v"] = 5
        materializer.refresh(root, materializer.begin_pass())
        new = child(root, "v")

        assert new is not old
        assert new.value_class is ValueClass.PRIMITIVE
        assert new.display_label == "5"
        assert cache.lookup(old.value) == []

    def test_unchanged_children_keep_identity(self):
        graph = {"n": 1, "s": "text", "m": {}}
        materializer, _, root = make_root(graph)
        materializer.expand(root)
        before = list(root.open_children)

        materializer.refresh(root, materializer.begin_pass())

        assert all(a is b for a, b in zip(before, root.open_children))

    def test_enumeration_failure_renders_empty(self, caplog):
        materializer, _, root = make_root({"bad": ExplodingMapping(), "ok": 1})
        with caplog.at_level(logging.WARNING):
            materializer.expand(root)

        bad = child(root, "bad")
        assert bad.display_label == "{ 0 }"
        assert keys_of(root) == ["ok", "bad"]


def test_order_children_is_case_insensitive():
    materializer, _, root = make_root({"beta": 1, "Alpha": 2, "gamma": 3})
    materializer.expand(root)
    assert [c.key for c in order_children(list(root.child_index.values()))] == ["Alpha", "beta", "gamma"]
