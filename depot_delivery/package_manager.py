"""Adapter around the process-wide package-manager configuration and pip.

All ambient state a depot build touches lives behind this module: the
``PYTHONPATH`` search path, the ``PYTHONDONTWRITEBYTECODE`` precompilation
flag and the active project.
"""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from depot_delivery.config import PipOptions
from depot_delivery.errors import ConfigurationError, ResolutionError
from depot_delivery.layout import DepotLayout
from depot_delivery.platforms import Platform
from depot_delivery.project.descriptor import ManifestEntry
from depot_delivery.project.manifest import read_manifest
from depot_delivery.project.parser import ProjectParser

logger = logging.getLogger(__name__)

SEARCH_PATH_VAR = "PYTHONPATH"
PRECOMPILE_VAR = "PYTHONDONTWRITEBYTECODE"
# Where `pip install --target` puts console scripts (POSIX, Windows).
SCRIPT_DIRS = ("bin", "Scripts")

# One active project per process, shared by every adapter instance.
_active_project: Optional[Path] = None


def cache_ignore(precompile: bool):
    """``shutil.copytree`` ignore callable dropping bytecode caches."""
    if precompile:
        return None
    return shutil.ignore_patterns("__pycache__", "*.pyc", "*.pyo")


class PackageManager(ABC):
    """Abstract package manager driven by the depot builder.

    Subclasses implement dependency materialization; the ambient
    configuration accessors are shared.
    """

    @property
    def search_path(self) -> Optional[List[str]]:
        """Current search-path entries, or None when the variable is unset."""
        value = os.environ.get(SEARCH_PATH_VAR)
        if value is None:
            return None
        return value.split(os.pathsep)

    @search_path.setter
    def search_path(self, entries: Optional[Sequence[str]]) -> None:
        if entries is None:
            os.environ.pop(SEARCH_PATH_VAR, None)
        else:
            os.environ[SEARCH_PATH_VAR] = os.pathsep.join(str(e) for e in entries)

    @property
    def precompile(self) -> Optional[str]:
        """Raw value of the precompilation flag variable."""
        return os.environ.get(PRECOMPILE_VAR)

    @precompile.setter
    def precompile(self, value: Optional[str]) -> None:
        if value is None:
            os.environ.pop(PRECOMPILE_VAR, None)
        else:
            os.environ[PRECOMPILE_VAR] = value

    @property
    def precompile_enabled(self) -> bool:
        return not self.precompile

    def enable_precompile(self, enabled: bool) -> None:
        self.precompile = None if enabled else "1"

    def current_project(self) -> Optional[Path]:
        return _active_project

    def activate(self, project: Union[str, Path, None]) -> None:
        """Make ``project`` the active environment (None restores the default).

        Raises:
            ConfigurationError: If the project directory does not exist
        """
        global _active_project
        if project is None:
            _active_project = None
            logger.debug("Activated default environment")
            return

        path = Path(project).resolve()
        if not path.is_dir():
            raise ConfigurationError(f"Cannot activate {path}: not a directory")
        _active_project = path
        logger.debug(f"Activated project {path}")

    def read_manifest(self, manifest_path: Union[str, Path]) -> Dict[str, ManifestEntry]:
        return read_manifest(manifest_path)

    def install_root(self) -> Path:
        """First search-path entry, where dependencies are materialized.

        Raises:
            ResolutionError: If the search path is empty
        """
        entries = [entry for entry in (self.search_path or []) if entry]
        if not entries:
            raise ResolutionError(f"{SEARCH_PATH_VAR} is empty; nowhere to install dependencies")
        return Path(entries[0]).resolve()

    @abstractmethod
    def instantiate(self, platform: Platform, verbose: bool = True) -> None:
        """Materialize the active project's dependency closure.

        Raises:
            ResolutionError: If resolution or download fails
        """
        pass

    @abstractmethod
    def dev(self, local_path: Union[str, Path]) -> Path:
        """Materialize a path dependency into the active environment.

        Returns:
            Location of the linked sources

        Raises:
            ResolutionError: If the dependency cannot be linked
        """
        pass


class PipPackageManager(PackageManager):
    """Package manager backed by ``python -m pip install --target``."""

    def __init__(self, options: Optional[PipOptions] = None):
        """Initialize the pip package manager.

        Args:
            options: pip options (defaults to the running interpreter and PyPI)
        """
        self.options = options or PipOptions()
        self.parser = ProjectParser()

    def requirements(self, project: Path) -> List[str]:
        """Requirements to install for a project directory.

        Registry entries of ``pylock.toml`` are pinned when the lock exists;
        path entries are left to ``dev``. Without a lock, the declared
        dependencies are used.
        """
        descriptor = self.parser.parse(project)
        manifest = self.read_manifest(descriptor.manifest_path)
        if manifest:
            return [entry.requirement() for entry in manifest.values() if not entry.is_path]
        return list(descriptor.dependencies)

    def install_command(
        self,
        requirements: Sequence[str],
        target: Path,
        platform: Platform,
        verbose: bool = True
    ) -> List[str]:
        """Build the pip command installing ``requirements`` into ``target``."""
        cmd = [
            self.options.python, "-m", "pip", "install",
            "--target", str(target),
            "--upgrade",
            "--disable-pip-version-check",
        ]
        if not self.precompile_enabled:
            cmd.append("--no-compile")
        if not platform.is_host:
            cmd += ["--platform", platform.tag, "--only-binary=:all:"]
            if self.options.python_version:
                cmd += ["--python-version", self.options.python_version]
        if not verbose:
            cmd.append("--quiet")
        cmd += self.options.to_args()
        return cmd + list(requirements)

    def instantiate(self, platform: Platform, verbose: bool = True) -> None:
        project = self.current_project()
        if project is None:
            raise ResolutionError("No active project to instantiate")

        target = self.install_root()
        requirements = self.requirements(project)
        if not requirements:
            logger.info(f"No dependencies to install for {project.name}")
            return

        target.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"Installing {len(requirements)} requirement(s) for {project.name} "
            f"into {target} (platform {platform})"
        )
        self._run_pip(self.install_command(requirements, target, platform, verbose), verbose)
        self._remove_scripts(target)

    def dev(self, local_path: Union[str, Path]) -> Path:
        source = Path(local_path).resolve()
        if not source.is_dir():
            raise ResolutionError(f"Path dependency not found: {source}")

        try:
            name = self.parser.parse(source).name
        except ConfigurationError:
            name = source.name

        packages = self.install_root()
        layout = DepotLayout.from_packages(packages)
        destination = layout.project(name)
        try:
            shutil.copytree(
                source,
                destination,
                dirs_exist_ok=True,
                ignore=cache_ignore(self.precompile_enabled),
            )
            source_root = destination / "src" if (destination / "src").is_dir() else destination
            packages.mkdir(parents=True, exist_ok=True)
            pth_file = packages / f"{name}.pth"
            pth_file.write_text(os.path.relpath(source_root, packages) + "\n", encoding="utf-8")
        except OSError as e:
            raise ResolutionError(f"Failed to link path dependency {source}: {e}") from e

        logger.info(f"Linked path dependency {name} from {source}")
        return destination

    def _remove_scripts(self, target: Path) -> None:
        """Drop console scripts pip wrote next to the packages.

        Their shebangs hold the building interpreter's absolute path, and
        the depot is loaded through its startup script instead.
        """
        for dirname in SCRIPT_DIRS:
            scripts = target / dirname
            if scripts.is_dir():
                shutil.rmtree(scripts)
                logger.debug(f"Removed console scripts in {scripts}")

    def _run_pip(self, cmd: List[str], verbose: bool) -> None:
        """Run a pip command.

        Raises:
            ResolutionError: If pip cannot be started or exits non-zero
        """
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            subprocess.run(
                cmd,
                capture_output=not verbose,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip()
            message = f"pip install failed ({e.returncode})"
            raise ResolutionError(f"{message}: {detail}" if detail else message) from e
        except FileNotFoundError as e:
            raise ResolutionError(f"Python executable not found: {e}") from e
