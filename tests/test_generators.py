"""Tests for generator table loading."""

import os.path

import pytest

from cistats.generators import load_generator, load_generators
from cistats.sync.errors import ConfigError


class TestLoadGenerator:
    def test_valid_path(self):
        assert load_generator("os.path:join") is os.path.join

    def test_nested_attribute(self):
        assert load_generator("os:path.join") is os.path.join

    @pytest.mark.parametrize("path", ["os.path.join", ":join", "os.path:", ""])
    def test_malformed_path(self, path):
        with pytest.raises(ConfigError, match="must look like"):
            load_generator(path)

    def test_missing_module(self):
        with pytest.raises(ConfigError, match="Could not import"):
            load_generator("no_such_module_xyz:fn")

    def test_missing_attribute(self):
        with pytest.raises(ConfigError, match="not found"):
            load_generator("os.path:no_such_fn")

    def test_not_callable(self):
        with pytest.raises(ConfigError, match="not callable"):
            load_generator("os.path:sep")


class TestLoadGenerators:
    def test_keeps_order(self):
        table = load_generators({"b": "os.path:join", "a": "os.path:basename"})

        assert list(table) == ["b", "a"]
        assert table["a"] is os.path.basename
