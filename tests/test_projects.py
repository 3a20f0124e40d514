"""Tests for project refs."""

import tempfile
from pathlib import Path

import pytest

from cistats.projects import ProjectModule, ProjectNotFoundError, ProjectRef, ProjectStore
from cistats.sync.protocols import ProjectConfigProtocol


class TestProjectModule:
    """Tests for ProjectModule."""

    def test_owner_and_name_from_ssh(self):
        module = ProjectModule(name="enterprise", repo="git@github.com:acme/enterprise.git", branch="main")

        assert module.get_repo_owner_and_name() == ("acme", "enterprise")

    def test_owner_and_name_from_https(self):
        module = ProjectModule(name="tools", repo="https://github.com/acme/tools", branch="main")

        assert module.get_repo_owner_and_name() == ("acme", "tools")

    def test_owner_and_name_unparseable(self):
        module = ProjectModule(name="bad", repo="nonsense", branch="main")

        assert module.get_repo_owner_and_name() == ("", "")


class TestProjectStore:
    """Tests for ProjectStore."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = ProjectStore(Path(self.temp_dir) / "projects.db")

    def teardown_method(self):
        self.store.close()

    def test_implements_protocol(self):
        assert isinstance(self.store, ProjectConfigProtocol)

    def test_save_and_find(self):
        ref = ProjectRef(
            identifier="server",
            branch="master",
            files_ignored_from_cache=["^gen_"],
            modules=[ProjectModule("tools", "git@github.com:acme/tools.git", "main")],
        )

        self.store.save(ref)

        assert self.store.find_one("server") == ref

    def test_find_missing(self):
        assert self.store.find_one("nope") is None

    def test_save_replaces(self):
        self.store.save(ProjectRef(identifier="server", files_ignored_from_cache=["a"]))
        self.store.save(ProjectRef(identifier="server", files_ignored_from_cache=["b"]))

        assert self.store.get_ignore_patterns("server") == ["b"]
        assert self.store.list_identifiers() == ["server"]

    def test_ignore_patterns_unknown_project(self):
        with pytest.raises(ProjectNotFoundError):
            self.store.get_ignore_patterns("nope")
