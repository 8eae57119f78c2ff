"""Target platform identifiers for depot builds."""

import re
import sysconfig
from dataclasses import dataclass
from typing import Optional, Union

_TAG_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")

# Docker platform strings for the machine suffixes pip tags carry.
_DOCKER_ARCHITECTURES = {
    "x86_64": "linux/amd64",
    "amd64": "linux/amd64",
    "aarch64": "linux/arm64",
    "arm64": "linux/arm64",
    "armv7l": "linux/arm/v7",
    "i686": "linux/386",
    "ppc64le": "linux/ppc64le",
    "s390x": "linux/s390x",
}


def host_tag() -> str:
    """Return the pip platform tag of the running interpreter."""
    return sysconfig.get_platform().replace("-", "_").replace(".", "_")


@dataclass(frozen=True)
class Platform:
    """Opaque platform tag handed to the resolver as-is.

    The tag uses pip's ``--platform`` spelling, for example
    ``manylinux2014_x86_64``, ``win_amd64`` or ``macosx_11_0_arm64``.

    Attributes:
        tag: Platform tag string
    """
    tag: str

    def __post_init__(self):
        """Validate the platform tag after initialization."""
        if not isinstance(self.tag, str) or not _TAG_PATTERN.match(self.tag):
            raise ValueError(
                f"Invalid platform tag: {self.tag!r}. "
                "Expected a pip platform tag such as 'manylinux2014_x86_64'"
            )

    @classmethod
    def host(cls) -> "Platform":
        """Platform of the running interpreter."""
        return cls(host_tag())

    @classmethod
    def parse(cls, value: Union["Platform", str, None]) -> "Platform":
        """Coerce a tag string (or ``None`` for the host) into a Platform.

        Args:
            value: Platform instance, tag string or None

        Returns:
            Platform instance

        Raises:
            ValueError: If the tag is invalid
        """
        if value is None:
            return cls.host()
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.strip())
        raise ValueError(f"Platform must be a tag string, got {type(value)}")

    @property
    def is_host(self) -> bool:
        return self.tag == host_tag()

    @property
    def os_name(self) -> Optional[str]:
        """Operating system family encoded in the tag, if recognizable."""
        tag = self.tag.lower()
        if tag.startswith("win"):
            return "windows"
        if tag.startswith("macosx"):
            return "macos"
        if tag.startswith(("linux", "manylinux", "musllinux")):
            return "linux"
        return None

    @property
    def docker_platform(self) -> Optional[str]:
        """Docker ``--platform`` value for Linux tags, None otherwise."""
        if self.os_name != "linux":
            return None
        for arch, docker_platform in _DOCKER_ARCHITECTURES.items():
            if self.tag.endswith(f"_{arch}"):
                return docker_platform
        return None

    def __str__(self) -> str:
        return self.tag
