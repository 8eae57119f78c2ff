"""Runners that load a built depot in a fresh interpreter."""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Any, List, Optional, Union

import docker
from docker.errors import APIError, DockerException, ImageNotFound

from depot_delivery.layout import DepotLayout
from depot_delivery.platforms import Platform

logger = logging.getLogger(__name__)

CONTAINER_DEPOT = "/depot"


def loader_script(startup_file: Union[str, Path]) -> str:
    """Python source that runs a depot's startup script."""
    return (
        "import runpy, sys\n"
        "print('Loading the depot startup script', file=sys.stderr)\n"
        f"runpy.run_path({str(startup_file)!r}, run_name='__main__')\n"
    )


class TestRunner:
    """Checks that a depot loads on its own in an isolated interpreter.

    The child runs with ``-I``: no ``PYTHON*`` variables, no user site and
    no startup customization reach it, so nothing from the builder process
    can mask a missing dependency.
    """

    __test__ = False

    def __init__(self, python: Optional[str] = None):
        """Initialize the test runner.

        Args:
            python: Interpreter to spawn (defaults to the running one)
        """
        self.python = python or sys.executable

    def command(self, depot_path: Union[str, Path]) -> List[str]:
        startup = DepotLayout.at(depot_path).startup_file
        return [self.python, "-I", "-c", loader_script(startup)]

    def run(self, depot_path: Union[str, Path]) -> bool:
        """Run the depot's startup script; True when it exits with status 0.

        Blocks until the child exits. Output goes to the inherited
        stdout/stderr.
        """
        cmd = self.command(depot_path)
        logger.info(f"Testing depot {depot_path}")
        process = subprocess.run(cmd, check=False)
        if process.returncode != 0:
            logger.error(f"Depot {depot_path} failed to load (exit code {process.returncode})")
            return False
        logger.info(f"Depot {depot_path} loaded successfully")
        return True


class ContainerTestRunner:
    """Loads a depot inside a Docker container of its target platform.

    The depot is mounted read-only and networking is disabled, which also
    checks that nothing needs to be downloaded at load time.
    """

    __test__ = False

    def __init__(
        self,
        docker_client: Optional[Any] = None,
        image: Optional[str] = None
    ):
        """Initialize the container test runner.

        Args:
            docker_client: Docker client instance. If None, one is created
                with docker.from_env().
            image: Image to run (defaults to python:<major>.<minor>-slim)

        Raises:
            RuntimeError: If the Docker daemon is unreachable
        """
        if docker_client is None:
            try:
                docker_client = docker.from_env()
            except DockerException as e:
                raise RuntimeError(
                    f"Failed to connect to Docker daemon: {e}. "
                    "Make sure Docker is running."
                ) from e
        self.docker_client = docker_client
        self.image = image or f"python:{sys.version_info.major}.{sys.version_info.minor}-slim"

    def run(
        self,
        depot_path: Union[str, Path],
        platform: Optional[Platform] = None
    ) -> bool:
        """Run the depot's startup script in a container.

        Args:
            depot_path: Depot root on the host
            platform: Target platform; must map to a Linux docker platform

        Returns:
            True when the container exits with status 0

        Raises:
            ValueError: If the platform has no docker equivalent
            RuntimeError: If the container cannot be created
        """
        layout = DepotLayout.at(depot_path)
        params = {
            "image": self.image,
            "command": [
                "python", "-I", "-c",
                loader_script(f"{CONTAINER_DEPOT}/config/{layout.startup_file.name}"),
            ],
            "volumes": {str(layout.root): {"bind": CONTAINER_DEPOT, "mode": "ro"}},
            "network_mode": "none",
            "detach": True,
        }
        if platform is not None:
            if platform.docker_platform is None:
                raise ValueError(f"No docker platform for {platform}")
            params["platform"] = platform.docker_platform

        try:
            container = self.docker_client.containers.run(**params)
        except ImageNotFound as e:
            raise RuntimeError(f"Image {self.image} not found. Pull the image first.") from e
        except APIError as e:
            raise RuntimeError(f"Failed to start test container: {e}") from e

        try:
            result = container.wait()
            exit_code = result.get("StatusCode", 1)
            output = container.logs()
            if isinstance(output, bytes):
                output = output.decode("utf-8", errors="replace")
            logger.debug(f"Container output for depot {layout.root}:\n{output}")
        finally:
            container.remove(force=True)

        if exit_code != 0:
            logger.error(f"Depot {layout.root} failed to load in {self.image} (exit code {exit_code})")
            return False
        logger.info(f"Depot {layout.root} loaded successfully in {self.image}")
        return True
