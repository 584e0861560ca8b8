"""Pytest configuration and shared fixtures."""
from collections.abc import Mapping

import pytest

import graphscope.config as config_module
from graphscope import BindingContext, Inspector, InspectorConfig, assign_path


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingMapping(Mapping):
    """Mapping that records every time its keys are listed or read."""

    def __init__(self, data):
        self._data = dict(data)
        self.key_reads = 0
        self.item_reads = 0

    def __getitem__(self, key):
        self.item_reads += 1
        return self._data[key]

    def __iter__(self):
        self.key_reads += 1
        return iter(self._data)

    def __len__(self):
        return len(self._data)


class ExplodingMapping(Mapping):
    """Mapping that refuses to list its keys."""

    def __getitem__(self, key):
        raise KeyError(key)

    def __iter__(self):
        raise RuntimeError("enumeration refused")

    def __len__(self):
        return 0


class RecordingContext(dict, BindingContext):
    """Dict-backed binding context that records every commit."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.commits = []

    def commit(self, path, value):
        self.commits.append((tuple(path), value))
        assign_path(self, path, value)


@pytest.fixture(autouse=True)
def restore_default_config():
    """Restore the module-level default config after each test."""
    original = config_module._default_config
    yield
    config_module._default_config = original


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return InspectorConfig()


@pytest.fixture
def inspector(config, clock):
    """Inspector on a fake clock with the default config."""
    return Inspector(config, clock=clock)


def child(node, key):
    """Find a materialized child of ``node`` by key (hidden ones included)."""
    return node.child_index[key]


def keys_of(node):
    return [c.key for c in node.children]
