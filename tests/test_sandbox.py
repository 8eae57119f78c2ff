"""Tests for GlobalPackageState and Sandbox."""

import logging

import pytest

from depot_delivery.errors import ConfigurationError, ResolutionError
from depot_delivery.sandbox import GlobalPackageState, Sandbox


class TestGlobalPackageState:
    """Test cases for GlobalPackageState."""

    def test_capture(self, package_manager, package_state):
        """Test capturing the ambient configuration."""
        state = GlobalPackageState.capture(package_manager)

        assert state.search_path == ("/opt/site/one", "/opt/site/two")
        assert state.precompile is None
        assert state.project == package_state

    def test_restore_round_trip(self, package_manager, tmp_path):
        """Test restoring after every field was overridden."""
        before = GlobalPackageState.capture(package_manager)

        package_manager.search_path = [str(tmp_path / "packages")]
        package_manager.enable_precompile(False)
        package_manager.activate(tmp_path)
        before.restore(package_manager)

        assert GlobalPackageState.capture(package_manager) == before

    def test_restore_unset_values_stay_unset(self, package_manager, monkeypatch, tmp_path):
        """Test that unset variables are removed again rather than emptied."""
        monkeypatch.delenv("PYTHONPATH")
        package_manager.activate(None)
        before = GlobalPackageState.capture(package_manager)
        assert before.search_path is None
        assert before.project is None

        package_manager.search_path = ["/somewhere"]
        package_manager.precompile = "1"
        package_manager.activate(tmp_path)
        before.restore(package_manager)

        assert package_manager.search_path is None
        assert package_manager.precompile is None
        assert package_manager.current_project() is None

    def test_restore_preserves_empty_entries(self, package_manager, monkeypatch):
        """Test that odd search-path values survive a round trip unchanged."""
        monkeypatch.setenv("PYTHONPATH", "/a::/b")
        before = GlobalPackageState.capture(package_manager)

        package_manager.search_path = ["/depot/packages"]
        before.restore(package_manager)

        assert package_manager.search_path == ["/a", "", "/b"]


class TestSandbox:
    """Test cases for Sandbox."""

    def test_run_returns_result_and_restores(self, package_manager, tmp_path):
        """Test normal return restores state and passes the result through."""
        before = GlobalPackageState.capture(package_manager)

        def routine():
            package_manager.search_path = [str(tmp_path)]
            package_manager.enable_precompile(False)
            package_manager.activate(tmp_path)
            return "done"

        assert Sandbox(package_manager).run(routine) == "done"
        assert GlobalPackageState.capture(package_manager) == before

    def test_run_failure_restores_and_reraises(self, package_manager, tmp_path, caplog):
        """Test that failures propagate unchanged after restoration."""
        before = GlobalPackageState.capture(package_manager)
        error = ResolutionError("index unreachable")

        def routine():
            package_manager.search_path = [str(tmp_path)]
            package_manager.activate(tmp_path)
            raise error

        with caplog.at_level(logging.WARNING):
            with pytest.raises(ResolutionError) as exc_info:
                Sandbox(package_manager).run(routine)

        assert exc_info.value is error
        assert GlobalPackageState.capture(package_manager) == before
        assert "sandbox failed" in caplog.text
        assert "index unreachable" in caplog.text

    def test_early_return_from_context(self, package_manager, tmp_path):
        """Test that leaving the with-block early still restores state."""
        before = GlobalPackageState.capture(package_manager)

        def routine():
            with Sandbox(package_manager):
                package_manager.search_path = [str(tmp_path)]
                return True

        assert routine() is True
        assert GlobalPackageState.capture(package_manager) == before

    def test_restores_exactly_once(self, package_manager, monkeypatch):
        """Test that restoration runs once per sandbox use."""
        calls = []
        original = GlobalPackageState.restore

        def counting_restore(self, manager):
            calls.append(self)
            original(self, manager)

        monkeypatch.setattr(GlobalPackageState, "restore", counting_restore)

        with pytest.raises(ValueError):
            Sandbox(package_manager).run(lambda: (_ for _ in ()).throw(ValueError("boom")))
        Sandbox(package_manager).run(lambda: None)

        assert len(calls) == 2

    def test_reentry_rejected(self, package_manager):
        """Test that an active sandbox cannot be entered again."""
        sandbox = Sandbox(package_manager)
        with sandbox:
            assert sandbox.active
            with pytest.raises(RuntimeError, match="already active"):
                sandbox.__enter__()
        assert not sandbox.active

    def test_sequential_reuse(self, package_manager, tmp_path):
        """Test that a sandbox can be reused once it has exited."""
        sandbox = Sandbox(package_manager)
        before = GlobalPackageState.capture(package_manager)

        for _ in range(2):
            with sandbox:
                package_manager.search_path = [str(tmp_path)]

        assert GlobalPackageState.capture(package_manager) == before

    def test_restore_failure_chains_with_original(self, package_manager, tmp_path):
        """Test that a failing restore keeps the in-flight failure as context."""
        project = tmp_path / "vanishing"
        project.mkdir()
        package_manager.activate(project)
        before = GlobalPackageState.capture(package_manager)

        def routine():
            project.rmdir()
            raise ResolutionError("resolver failed")

        with pytest.raises(ConfigurationError) as exc_info:
            Sandbox(package_manager).run(routine)

        assert isinstance(exc_info.value.__context__, ResolutionError)
        assert package_manager.search_path == list(before.search_path)
