"""Configuration classes for depot builds."""

import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from depot_delivery.errors import ConfigurationError
from depot_delivery.platforms import Platform


@dataclass
class PipOptions:
    """Options forwarded to pip when instantiating dependencies.

    Attributes:
        python: Interpreter used to run ``python -m pip``
        index_url: Primary package index (``--index-url``)
        extra_index_urls: Additional indexes (``--extra-index-url``)
        find_links: Local wheelhouses or pages of links (``--find-links``)
        no_index: Resolve only from ``find_links``
        python_version: Target interpreter version for foreign platforms (e.g., "3.11")
        extra_args: Extra arguments appended to every install command
    """
    python: str = sys.executable
    index_url: Optional[str] = None
    extra_index_urls: List[str] = field(default_factory=list)
    find_links: List[str] = field(default_factory=list)
    no_index: bool = False
    python_version: Optional[str] = None
    extra_args: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate pip options after initialization."""
        if not self.python:
            raise ConfigurationError("pip python executable cannot be empty")

        for name in ("extra_index_urls", "find_links", "extra_args"):
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigurationError(f"{name} must be a list of strings, got {value!r}")

        if self.no_index and not self.find_links:
            raise ConfigurationError("no_index requires at least one find_links entry")

        if self.python_version is not None:
            self.python_version = str(self.python_version)

    def to_args(self) -> List[str]:
        """Convert options to pip command-line arguments."""
        args: List[str] = []
        if self.index_url:
            args += ["--index-url", self.index_url]
        for url in self.extra_index_urls:
            args += ["--extra-index-url", url]
        for link in self.find_links:
            args += ["--find-links", link]
        if self.no_index:
            args.append("--no-index")
        return args + list(self.extra_args)


@dataclass
class BuildConfig:
    """Defaults for depot builds.

    Attributes:
        platform: Target platform tag (None for the host platform)
        verbose: Stream resolver output while building
        precompiled: Keep bytecode compilation enabled
        depot: Depot directory (None for a fresh temporary directory)
        verify_artifacts: Scan the depot for foreign native binaries after a build
        excluded_extensions: Extensions flagged by the scan (None for platform defaults)
        pip: Options for the pip resolver
    """
    platform: Optional[str] = None
    verbose: bool = True
    precompiled: bool = False
    depot: Optional[str] = None
    verify_artifacts: bool = False
    excluded_extensions: Optional[List[str]] = None
    pip: PipOptions = field(default_factory=PipOptions)

    def __post_init__(self):
        """Validate build configuration after initialization."""
        if self.platform is not None:
            try:
                Platform.parse(self.platform)
            except ValueError as e:
                raise ConfigurationError(str(e)) from e

        for name in ("verbose", "precompiled", "verify_artifacts"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a boolean")

        if self.excluded_extensions is not None:
            if not isinstance(self.excluded_extensions, list):
                raise ConfigurationError(
                    f"excluded_extensions must be a list, got {type(self.excluded_extensions)}"
                )
            self.excluded_extensions = [
                _normalize_extension(ext) for ext in self.excluded_extensions
            ]

        if isinstance(self.pip, dict):
            self.pip = PipOptions(**self.pip)

    @property
    def target_platform(self) -> Platform:
        return Platform.parse(self.platform)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildConfig":
        """Create a configuration from a plain mapping.

        Raises:
            ConfigurationError: If unknown keys are present or values are invalid
        """
        if not isinstance(data, dict):
            raise ConfigurationError(f"Build configuration must be a mapping, got {type(data)}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown build configuration keys: {', '.join(unknown)}")

        pip_data = data.get("pip") or {}
        pip_known = {f.name for f in fields(PipOptions)}
        pip_unknown = sorted(set(pip_data) - pip_known)
        if pip_unknown:
            raise ConfigurationError(f"Unknown pip configuration keys: {', '.join(pip_unknown)}")

        values = {key: value for key, value in data.items() if key != "pip"}
        return cls(pip=PipOptions(**pip_data), **values)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BuildConfig":
        """Load a configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConfigurationError: If the file cannot be parsed
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Build configuration not found: {path}")

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        return cls.from_dict(data or {})


def _normalize_extension(ext: Any) -> str:
    if not isinstance(ext, str) or not ext.strip():
        raise ConfigurationError(f"Invalid file extension: {ext!r}")
    ext = ext.strip().lower()
    return ext if ext.startswith(".") else f".{ext}"
