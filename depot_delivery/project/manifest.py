"""Reader for ``pylock.toml`` lock manifests."""

import logging
import tomllib
from pathlib import Path
from typing import Dict, Union

from depot_delivery.errors import ConfigurationError
from depot_delivery.project.descriptor import ManifestEntry, normalize_name

logger = logging.getLogger(__name__)

MANIFEST_FILE = "pylock.toml"


def read_manifest(manifest_path: Union[str, Path]) -> Dict[str, ManifestEntry]:
    """Read a lock manifest into entries keyed by normalized name.

    Packages with a ``directory`` table are path dependencies; their path is
    resolved relative to the manifest. A missing manifest yields no entries.

    Args:
        manifest_path: Path to the lock file

    Returns:
        Mapping of normalized distribution name to ManifestEntry

    Raises:
        ConfigurationError: If the manifest cannot be parsed
    """
    path = Path(manifest_path)
    if not path.is_file():
        logger.debug(f"No manifest at {path}")
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to read manifest {path}: {e}") from e

    packages = data.get("packages", [])
    if not isinstance(packages, list):
        raise ConfigurationError(f"'packages' in {path} must be an array of tables")

    entries: Dict[str, ManifestEntry] = {}
    for package in packages:
        if not isinstance(package, dict) or not package.get("name"):
            raise ConfigurationError(f"Manifest {path} has a package without a name")

        directory = package.get("directory")
        local_path = None
        editable = False
        if isinstance(directory, dict) and directory.get("path"):
            local_path = (path.parent / directory["path"]).resolve()
            editable = bool(directory.get("editable", False))

        entry = ManifestEntry(
            name=package["name"],
            version=package.get("version"),
            path=local_path,
            editable=editable,
            marker=package.get("marker"),
        )
        entries[normalize_name(entry.name)] = entry

    return entries
