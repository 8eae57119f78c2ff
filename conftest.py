"""Shared pytest fixtures."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from depot_delivery import package_manager as pm_module
from depot_delivery.errors import ResolutionError
from depot_delivery.package_manager import PipPackageManager


class RecordingPackageManager(PipPackageManager):
    """PipPackageManager that records pip commands instead of running them."""

    def __init__(self, fail_with: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.commands: List[List[str]] = []
        self.fail_with = fail_with

    def _run_pip(self, cmd: List[str], verbose: bool) -> None:
        self.commands.append(cmd)
        if self.fail_with:
            raise ResolutionError(self.fail_with)


@pytest.fixture(autouse=True)
def package_state(monkeypatch, tmp_path):
    """Give every test a known ambient configuration and put it back afterwards."""
    original = tmp_path / "original-project"
    original.mkdir()
    monkeypatch.setenv("PYTHONPATH", "/opt/site/one:/opt/site/two")
    monkeypatch.delenv("PYTHONDONTWRITEBYTECODE", raising=False)
    monkeypatch.setattr(pm_module, "_active_project", original.resolve())
    return original.resolve()


@pytest.fixture
def package_manager():
    """A pip package manager that never spawns pip."""
    return RecordingPackageManager()


@pytest.fixture
def make_project(tmp_path):
    """Factory creating project directories from file contents."""
    def _make(dirname: str, files: Dict[str, str]) -> Path:
        root = tmp_path / "projects" / dirname
        for relative, content in files.items():
            file_path = root / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")
        return root
    return _make
