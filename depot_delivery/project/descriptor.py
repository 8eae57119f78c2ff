"""Data structures for project descriptors and their lock manifests."""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


def normalize_name(name: str) -> str:
    """Normalize a distribution name for comparisons (PEP 503)."""
    return re.sub(r"[-_.]+", "-", name).lower()


@dataclass
class ProjectDescriptor:
    """Represents a parsed project file."""
    name: str
    project_file: Path
    manifest_path: Path
    dependencies: List[str] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate descriptor after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Project name cannot be empty")

    @property
    def root(self) -> Path:
        """Directory holding the project file."""
        return self.project_file.parent


@dataclass(frozen=True)
class ManifestEntry:
    """One resolved package in a lock manifest.

    Attributes:
        name: Distribution name
        version: Pinned version for registry packages
        path: Absolute source directory for path dependencies
        editable: Whether the lock marks the directory as editable
        marker: Environment marker limiting where the entry applies
    """
    name: str
    version: Optional[str] = None
    path: Optional[Path] = None
    editable: bool = False
    marker: Optional[str] = None

    @property
    def is_path(self) -> bool:
        return self.path is not None

    def requirement(self) -> str:
        """pip requirement string pinning this entry.

        The marker is kept so pip skips entries for other environments.
        """
        requirement = f"{self.name}=={self.version}" if self.version else self.name
        if self.marker:
            return f"{requirement}; {self.marker}"
        return requirement
