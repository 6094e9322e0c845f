"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Dict, List

import pytest

from yadu.errors import IntrospectionError
from yadu.introspect import Introspector

RUN_LOG = "run.log"

UNIT_SCRIPT = """\
description() {{
    echo "{description}"
}}

dependencies() {{
    echo "{dependencies}"
}}

[[ "${{BASH_SOURCE[0]}}" == "$0" ]] || return 0

echo {name} >> {log}
exit {exit_code}
"""


class UnitTree:
    """A throwaway context directory with helpers to write units into it."""

    def __init__(self, root: Path):
        self.root = root
        self.units_dir = root / "units"
        self.units_dir.mkdir(parents=True)

    def add(self, name, deps=(), description=None, exit_code=0):
        script = UNIT_SCRIPT.format(
            name=name,
            description=description or f"{name} unit",
            dependencies=" ".join(deps),
            log=RUN_LOG,
            exit_code=exit_code,
        )
        path = self.units_dir / name
        path.write_text(script, encoding="utf-8")
        path.chmod(0o755)
        return path

    def add_raw(self, name, text):
        path = self.units_dir / name
        path.write_text(text, encoding="utf-8")
        return path

    def environments(self, text):
        (self.root / "environments.yaml").write_text(text, encoding="utf-8")

    def runs(self) -> List[str]:
        """Unit names in the order their scripts actually ran."""
        log = self.root / RUN_LOG
        if not log.exists():
            return []
        return log.read_text(encoding="utf-8").split()


class FakeIntrospector(Introspector):
    """In-memory introspector keyed by unit name; records every query."""

    def __init__(self, graph: Dict[str, List[str]]):
        self.graph = graph
        self.calls: List[str] = []

    def description(self, name, file):
        if name not in self.graph:
            raise IntrospectionError(unit=name, query="description", stderr=f"{file}: No such file or directory", exit_code=1)
        return f"{name} unit"

    def dependencies(self, name, file):
        self.calls.append(name)
        if name not in self.graph:
            raise IntrospectionError(unit=name, query="dependencies", stderr=f"{file}: No such file or directory", exit_code=1)
        return list(self.graph[name])


@pytest.fixture
def tree(tmp_path):
    """Empty context directory with a units/ subdirectory."""
    return UnitTree(tmp_path / "dotfiles")


@pytest.fixture
def fake_tree(tmp_path):
    """
    Build a context whose units/ holds empty files, one per graph key, plus
    a FakeIntrospector answering for that graph.
    """

    def make(graph: Dict[str, List[str]], present=None):
        t = UnitTree(tmp_path / "fake")
        for name in (graph if present is None else present):
            (t.units_dir / name).write_text("", encoding="utf-8")
        return t, FakeIntrospector(graph)

    return make


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings file at tmp and clear any context override."""
    settings = tmp_path / "config" / "settings.json"
    monkeypatch.setenv("YADU_SETTINGS", str(settings))
    monkeypatch.delenv("YADU_CONTEXT", raising=False)
    return settings
