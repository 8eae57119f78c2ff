"""Project descriptor parsing."""

from depot_delivery.project.descriptor import ManifestEntry, ProjectDescriptor
from depot_delivery.project.manifest import read_manifest
from depot_delivery.project.parser import PROJECT_FILES, ProjectParser

__all__ = [
    "ManifestEntry",
    "PROJECT_FILES",
    "ProjectDescriptor",
    "ProjectParser",
    "read_manifest",
]
