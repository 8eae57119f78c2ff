"""Post-build scan for native artifacts foreign to the target platform."""

import logging
import os
import warnings
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from depot_delivery.errors import VerificationWarning
from depot_delivery.layout import DepotLayout
from depot_delivery.platforms import Platform

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_EXTENSIONS = (".dylib",)

# Native binary extensions that cannot load on each OS family.
_FOREIGN_EXTENSIONS = {
    "linux": (".dll", ".pyd", ".dylib"),
    "macos": (".dll", ".pyd"),
    "windows": (".so", ".dylib"),
}


def excluded_extensions_for(platform: Platform) -> Tuple[str, ...]:
    """Extensions of native binaries that are foreign to ``platform``.

    E.g. a Windows depot should not carry ``.so`` files, a Linux depot no
    ``.dll`` files. Unrecognized platforms fall back to the default set.
    """
    return _FOREIGN_EXTENSIONS.get(platform.os_name, DEFAULT_EXCLUDED_EXTENSIONS)


class ArtifactVerifier:
    """Detection aid for mismatched artifacts. Never fails a build."""

    def find_unexpected(
        self,
        depot_path: Union[str, Path],
        excluded_extensions: Optional[Iterable[str]] = None
    ) -> List[Path]:
        """Files under the depot's ``packages/`` with an excluded extension."""
        if excluded_extensions is None:
            excluded_extensions = DEFAULT_EXCLUDED_EXTENSIONS
        excluded = {ext.lower() for ext in excluded_extensions}
        packages = DepotLayout.at(depot_path).packages
        found: List[Path] = []
        for root, _dirs, files in os.walk(packages):
            for file in files:
                if os.path.splitext(file)[1].lower() in excluded:
                    found.append(Path(root) / file)
        return sorted(found)

    def scan(
        self,
        depot_path: Union[str, Path],
        excluded_extensions: Optional[Iterable[str]] = None
    ) -> bool:
        """Warn about every excluded artifact in the depot.

        Args:
            depot_path: Depot root
            excluded_extensions: Extensions to flag (defaults to ``.dylib``)

        Returns:
            Always True
        """
        found = self.find_unexpected(depot_path, excluded_extensions)
        for path in found:
            logger.warning(f"Found unexpected artifact: {path}")
        if found:
            warnings.warn(
                f"{len(found)} unexpected artifact(s) in depot {depot_path}",
                VerificationWarning,
                stacklevel=2,
            )
        return True
