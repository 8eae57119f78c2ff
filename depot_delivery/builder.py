"""Depot builder: packages a project and its dependency closure into a depot."""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Optional, Union

from depot_delivery.build_spec import BuildSpec
from depot_delivery.config import BuildConfig
from depot_delivery.errors import ConfigurationError
from depot_delivery.layout import DepotLayout
from depot_delivery.package_manager import PackageManager, PipPackageManager, cache_ignore
from depot_delivery.platforms import Platform
from depot_delivery.project.descriptor import ProjectDescriptor
from depot_delivery.project.parser import ProjectParser
from depot_delivery.sandbox import Sandbox
from depot_delivery.startup import StartupScriptGenerator
from depot_delivery.verify import ArtifactVerifier, excluded_extensions_for

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class DepotBuilder:
    """Builds self-contained depots from project directories.

    A build temporarily points the process-wide package configuration at
    the depot, so builds in one process must not run concurrently.
    """

    def __init__(
        self,
        package_manager: Optional[PackageManager] = None,
        config: Optional[BuildConfig] = None
    ):
        """Initialize the depot builder.

        Args:
            package_manager: Resolver driving instantiation (defaults to pip)
            config: Build defaults (optional, uses defaults if not provided)
        """
        self.config = config or BuildConfig()
        self.package_manager = package_manager or PipPackageManager(self.config.pip)
        self.parser = ProjectParser()
        self.scripts = StartupScriptGenerator()
        self.verifier = ArtifactVerifier()

    @classmethod
    def from_config_file(cls, path: PathLike) -> "DepotBuilder":
        return cls(config=BuildConfig.from_file(path))

    def build(
        self,
        path: Union[PathLike, Iterable[PathLike]],
        platform: Union[Platform, str, None] = None,
        verbose: Optional[bool] = None,
        depot: Optional[PathLike] = None,
        precompiled: Optional[bool] = None
    ) -> Path:
        """Build the depot for a project directory.

        Args:
            path: Project directory containing ``pyproject.toml`` or
                ``Project.toml``, or a list of such directories
            platform: Target platform (default is the host platform)
            verbose: Show resolver output (default is True)
            depot: Depot directory (default is a fresh temporary directory)
            precompiled: Keep bytecode compilation enabled (default is False)

        Returns:
            Path to the built depot

        Raises:
            ConfigurationError: If the project file is missing or invalid;
                raised before any state is changed
            ResolutionError: If dependencies cannot be instantiated or linked

        Example:
            >>> depot = DepotBuilder().build("/path/to/your/project")
        """
        if not isinstance(path, (str, os.PathLike)):
            return self.build_all(path, platform, verbose, depot, precompiled)

        target = self._target_platform(platform)
        verbose = self.config.verbose if verbose is None else verbose
        precompiled = self.config.precompiled if precompiled is None else precompiled

        descriptor = self.parser.parse(path)
        self.scripts.module_name(descriptor.name)
        layout = self._prepare_depot(depot)

        logger.info(f"Building depot {layout.root} for {descriptor.name} (platform {target})")
        Sandbox(self.package_manager).run(
            lambda: self._build_into(layout, descriptor, target, verbose, precompiled)
        )

        if self.config.verify_artifacts:
            excluded = self.config.excluded_extensions or excluded_extensions_for(target)
            self.verifier.scan(layout.root, excluded)

        return layout.root

    def build_all(
        self,
        paths: Iterable[PathLike],
        platform: Union[Platform, str, None] = None,
        verbose: Optional[bool] = None,
        depot: Optional[PathLike] = None,
        precompiled: Optional[bool] = None
    ) -> Path:
        """Build one depot holding several projects.

        Every project file is checked before the depot is created. Projects
        are then built in order into the same depot, each under its own
        ``dev/<name>``. When two projects resolve the same dependency
        differently, the later one wins.

        Example:
            >>> DepotBuilder().build_all(["/path/to/project1", "/path/to/project2"])
        """
        paths = list(paths)
        self._target_platform(platform)
        for path in paths:
            self.scripts.module_name(self.parser.parse(path).name)
        root = self._prepare_depot(depot).root
        for path in paths:
            self.build(path, platform=platform, verbose=verbose, depot=root, precompiled=precompiled)
        return root

    def _target_platform(self, platform: Union[Platform, str, None]) -> Platform:
        try:
            return Platform.parse(platform if platform is not None else self.config.platform)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _prepare_depot(self, depot: Optional[PathLike]) -> DepotLayout:
        if depot is None:
            depot = self.config.depot or tempfile.mkdtemp(prefix="depot-")
        layout = DepotLayout.at(depot)
        layout.root.mkdir(parents=True, exist_ok=True)
        return layout

    def _build_into(
        self,
        layout: DepotLayout,
        descriptor: ProjectDescriptor,
        platform: Platform,
        verbose: bool,
        precompiled: bool
    ) -> None:
        pm = self.package_manager
        name = descriptor.name
        build_spec = BuildSpec.create(descriptor, platform)

        layout.create(name)
        pm.search_path = [str(layout.packages)]
        # Bytecode caches are interpreter specific; keep them out unless requested.
        pm.enable_precompile(precompiled)

        project_dir = layout.project(name)
        logger.info(f"Copying {descriptor.root} into {project_dir}")
        shutil.copytree(
            descriptor.root,
            project_dir,
            dirs_exist_ok=True,
            ignore=cache_ignore(precompiled),
        )

        pm.activate(project_dir)
        pm.instantiate(platform, verbose)

        # Path dependencies are not captured by instantiate.
        for entry in pm.read_manifest(descriptor.manifest_path).values():
            if entry.is_path:
                logger.info(f"Linking path dependency {entry.name} from {entry.path}")
                pm.dev(entry.path)

        build_spec.write(layout.build_file)
        layout.startup_file.write_text(self.scripts.generate(name), encoding="utf-8")
        logger.info(f"Depot for {name} written to {layout.root}")
