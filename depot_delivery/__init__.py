"""Build self-contained, relocatable depots of Python projects."""

from pathlib import Path
from typing import Union

from depot_delivery.builder import DepotBuilder
from depot_delivery.config import BuildConfig, PipOptions
from depot_delivery.errors import (
    ConfigurationError,
    DepotError,
    ResolutionError,
    VerificationWarning,
)
from depot_delivery.package_manager import PackageManager, PipPackageManager
from depot_delivery.platforms import Platform
from depot_delivery.runner import ContainerTestRunner, TestRunner
from depot_delivery.sandbox import GlobalPackageState, Sandbox
from depot_delivery.startup import StartupScriptGenerator
from depot_delivery.verify import ArtifactVerifier

__version__ = "0.1.0"


def build(path, **kwargs) -> Path:
    """Build a depot for one project directory or a list of them.

    See DepotBuilder.build for the keyword arguments.
    """
    return DepotBuilder().build(path, **kwargs)


def test(depot_path: Union[str, Path]) -> bool:
    """Load a depot in a fresh isolated interpreter; True on success."""
    return TestRunner().run(depot_path)


test.__test__ = False

__all__ = [
    "ArtifactVerifier",
    "BuildConfig",
    "ConfigurationError",
    "ContainerTestRunner",
    "DepotBuilder",
    "DepotError",
    "GlobalPackageState",
    "PackageManager",
    "PipOptions",
    "PipPackageManager",
    "Platform",
    "ResolutionError",
    "Sandbox",
    "StartupScriptGenerator",
    "TestRunner",
    "VerificationWarning",
    "build",
    "test",
]
