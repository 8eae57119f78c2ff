"""Parser for locating and reading project files into ProjectDescriptor objects."""

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Union

from depot_delivery.errors import ConfigurationError
from depot_delivery.project.descriptor import ProjectDescriptor
from depot_delivery.project.manifest import MANIFEST_FILE

# Checked in order; the first existing file wins.
PROJECT_FILES = ("pyproject.toml", "Project.toml")


class ProjectParser:
    """Parses project directories into ProjectDescriptor objects."""

    def locate(self, path: Union[str, Path]) -> Path:
        """Find the project file inside a project directory.

        Args:
            path: Project directory

        Returns:
            Path to the first recognized project file

        Raises:
            ConfigurationError: If the directory or project file is missing
        """
        root = Path(path).resolve()
        if not root.is_dir():
            raise ConfigurationError(f"Project path is not a directory: {root}")

        for filename in PROJECT_FILES:
            candidate = root / filename
            if candidate.is_file():
                return candidate

        raise ConfigurationError(
            f"No {' or '.join(PROJECT_FILES)} found in `{root}`."
        )

    def parse(self, path: Union[str, Path]) -> ProjectDescriptor:
        """
        Parse the project file of a directory into a ProjectDescriptor.

        Supports two formats:
        1. ``pyproject.toml``: name and dependencies from the ``[project]`` table.
        2. ``Project.toml``: top-level ``name`` and a ``dependencies`` array or
           a ``[deps]`` table whose keys are package names.

        A project without a declared name is named after its directory.

        Args:
            path: Project directory

        Returns:
            ProjectDescriptor object

        Raises:
            ConfigurationError: If the project file is missing or unparsable
        """
        project_file = self.locate(path)
        try:
            with open(project_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to parse {project_file}: {e}") from e

        table = data.get("project", {})
        if not isinstance(table, dict):
            table = {}

        name = table.get("name") or data.get("name") or project_file.parent.name
        if not isinstance(name, str):
            raise ConfigurationError(f"Project name in {project_file} must be a string")

        return ProjectDescriptor(
            name=name,
            project_file=project_file,
            manifest_path=project_file.parent / MANIFEST_FILE,
            dependencies=self._extract_dependencies(table, data),
            data=data,
        )

    def _extract_dependencies(
        self,
        table: Dict[str, Any],
        data: Dict[str, Any]
    ) -> List[str]:
        """Collect declared dependency requirement strings."""
        declared = table.get("dependencies", data.get("dependencies"))
        if declared is None:
            deps = data.get("deps", {})
            declared = list(deps.keys()) if isinstance(deps, dict) else []

        if not isinstance(declared, list):
            raise ConfigurationError("Project dependencies must be an array of strings")
        return [str(requirement) for requirement in declared]
