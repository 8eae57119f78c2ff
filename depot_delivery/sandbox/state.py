"""Snapshot of the process-wide package-manager configuration."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from depot_delivery.package_manager import PackageManager


@dataclass(frozen=True)
class GlobalPackageState:
    """Ambient configuration a depot build overrides.

    Values are kept raw so restoring reproduces an unset variable as unset.

    Attributes:
        search_path: Search-path entries, or None when unset
        precompile: Precompilation flag value, or None when unset
        project: Active project, or None for the default environment
    """
    search_path: Optional[Tuple[str, ...]]
    precompile: Optional[str]
    project: Optional[Path]

    @classmethod
    def capture(cls, manager: PackageManager) -> "GlobalPackageState":
        search_path = manager.search_path
        return cls(
            search_path=None if search_path is None else tuple(search_path),
            precompile=manager.precompile,
            project=manager.current_project(),
        )

    def restore(self, manager: PackageManager) -> None:
        """Put the captured values back.

        Environment variables are restored before the project is reactivated,
        so a project that vanished meanwhile cannot leave them overridden.
        """
        manager.search_path = None if self.search_path is None else list(self.search_path)
        manager.precompile = self.precompile
        manager.activate(self.project)
