"""Tests for TestRunner and ContainerTestRunner."""

import subprocess
import sys
from unittest.mock import MagicMock, patch

import pytest

from depot_delivery.platforms import Platform
from depot_delivery.runner import ContainerTestRunner, TestRunner, loader_script


def write_startup(depot, body):
    config = depot / "config"
    config.mkdir(parents=True)
    (config / "depot_startup.py").write_text(body)


class TestTestRunner:
    """Test cases for TestRunner."""

    def test_command_is_isolated(self, tmp_path):
        """Test that the child interpreter runs in isolated mode."""
        cmd = TestRunner(python="python3").command(tmp_path)

        assert cmd[:3] == ["python3", "-I", "-c"]
        assert str(tmp_path.resolve() / "config" / "depot_startup.py") in cmd[3]

    def test_defaults_to_running_interpreter(self):
        """Test the default interpreter."""
        assert TestRunner().python == sys.executable

    def test_success(self, tmp_path):
        """Test that exit status 0 passes."""
        write_startup(tmp_path, "import sys\nsys.exit(0)\n")
        assert TestRunner().run(tmp_path) is True

    def test_failure(self, tmp_path):
        """Test that a failing startup script fails the run."""
        write_startup(tmp_path, "raise ImportError('missing dependency')\n")
        assert TestRunner().run(tmp_path) is False

    def test_missing_startup_script(self, tmp_path):
        """Test that a depot without a startup script fails."""
        assert TestRunner().run(tmp_path) is False

    def test_environment_not_inherited(self, tmp_path, monkeypatch):
        """Test that PYTHONPATH from the building process does not reach the child."""
        leaked = tmp_path / "leaked"
        leaked.mkdir()
        (leaked / "leaky_module.py").write_text("")
        monkeypatch.setenv("PYTHONPATH", str(leaked))
        write_startup(tmp_path / "depot", "import leaky_module\n")

        assert TestRunner().run(tmp_path / "depot") is False

    def test_exit_status_only(self, tmp_path):
        """Test that success comes from the exit status alone."""
        with patch("depot_delivery.runner.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess([], 3)
            assert TestRunner().run(tmp_path) is False
            mock_run.return_value = subprocess.CompletedProcess([], 0)
            assert TestRunner().run(tmp_path) is True


class TestContainerTestRunner:
    """Test cases for ContainerTestRunner."""

    def make_client(self, status_code=0):
        mock_client = MagicMock()
        mock_container = MagicMock()
        mock_container.wait.return_value = {"StatusCode": status_code}
        mock_container.logs.return_value = b"Initializing depot"
        mock_client.containers.run.return_value = mock_container
        return mock_client, mock_container

    def test_init_without_docker_client(self):
        """Test that a client is created from the environment."""
        with patch("depot_delivery.runner.docker") as mock_docker_module:
            mock_client = MagicMock()
            mock_docker_module.from_env.return_value = mock_client

            runner = ContainerTestRunner()

            assert runner.docker_client == mock_client
            mock_docker_module.from_env.assert_called_once()

    def test_init_docker_connection_failure(self):
        """Test initialization when the Docker daemon is unreachable."""
        from docker.errors import DockerException

        with patch("depot_delivery.runner.docker") as mock_docker_module:
            mock_docker_module.from_env.side_effect = DockerException("Connection refused")
            with pytest.raises(RuntimeError, match="Failed to connect to Docker daemon"):
                ContainerTestRunner()

    def test_run_success(self, tmp_path):
        """Test a passing container run."""
        mock_client, mock_container = self.make_client(0)
        runner = ContainerTestRunner(docker_client=mock_client, image="python:3.12-slim")

        assert runner.run(tmp_path, Platform("manylinux2014_aarch64")) is True

        params = mock_client.containers.run.call_args[1]
        assert params["image"] == "python:3.12-slim"
        assert params["network_mode"] == "none"
        assert params["platform"] == "linux/arm64"
        assert params["volumes"] == {str(tmp_path.resolve()): {"bind": "/depot", "mode": "ro"}}
        assert params["command"][:3] == ["python", "-I", "-c"]
        assert "/depot/config/depot_startup.py" in params["command"][3]
        mock_container.remove.assert_called_once_with(force=True)

    def test_run_failure(self, tmp_path):
        """Test a failing container run."""
        mock_client, mock_container = self.make_client(1)
        runner = ContainerTestRunner(docker_client=mock_client)

        assert runner.run(tmp_path) is False
        assert "platform" not in mock_client.containers.run.call_args[1]
        mock_container.remove.assert_called_once_with(force=True)

    def test_run_non_linux_platform(self, tmp_path):
        """Test that platforms without a docker equivalent are rejected."""
        mock_client, _ = self.make_client()
        runner = ContainerTestRunner(docker_client=mock_client)

        with pytest.raises(ValueError, match="No docker platform"):
            runner.run(tmp_path, Platform("win_amd64"))
        mock_client.containers.run.assert_not_called()

    def test_run_image_missing(self, tmp_path):
        """Test that a missing image raises RuntimeError."""
        from docker.errors import ImageNotFound

        mock_client = MagicMock()
        mock_client.containers.run.side_effect = ImageNotFound("no such image")
        runner = ContainerTestRunner(docker_client=mock_client, image="python:3.99-slim")

        with pytest.raises(RuntimeError, match="Image python:3.99-slim not found"):
            runner.run(tmp_path)


def test_loader_script_runs_startup_as_main(tmp_path):
    """Test the loader source."""
    script = loader_script(tmp_path / "depot_startup.py")
    assert "runpy.run_path(" in script
    assert repr(str(tmp_path / "depot_startup.py")) in script
