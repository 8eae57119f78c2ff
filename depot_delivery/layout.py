"""Fixed directory layout of a depot."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

CONFIG_DIR = "config"
DEV_DIR = "dev"
PACKAGES_DIR = "packages"
BUILD_FILE = "depot_build.toml"
STARTUP_FILE = "depot_startup.py"


@dataclass(frozen=True)
class DepotLayout:
    """Paths inside a depot rooted at ``root``.

    A depot contains:
    - ``config/``: build provenance and the startup script
    - ``dev/<name>/``: project sources and linked path dependencies
    - ``packages/``: the installed dependency closure
    """
    root: Path

    @classmethod
    def at(cls, root: Union[str, Path]) -> "DepotLayout":
        return cls(Path(root).resolve())

    @classmethod
    def from_packages(cls, packages: Union[str, Path]) -> "DepotLayout":
        """Recover the layout from its ``packages/`` directory."""
        return cls.at(Path(packages).parent)

    @property
    def config(self) -> Path:
        return self.root / CONFIG_DIR

    @property
    def dev(self) -> Path:
        return self.root / DEV_DIR

    @property
    def packages(self) -> Path:
        return self.root / PACKAGES_DIR

    @property
    def build_file(self) -> Path:
        return self.config / BUILD_FILE

    @property
    def startup_file(self) -> Path:
        return self.config / STARTUP_FILE

    def project(self, name: str) -> Path:
        return self.dev / name

    def create(self, name: str) -> None:
        """Create the skeleton directories for project ``name``."""
        for path in (self.config, self.project(name), self.packages):
            path.mkdir(parents=True, exist_ok=True)
