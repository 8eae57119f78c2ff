"""Scoped guard restoring package-manager configuration after a build."""

import logging
from typing import Callable, Optional, TypeVar

from depot_delivery.package_manager import PackageManager
from depot_delivery.sandbox.state import GlobalPackageState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Sandbox:
    """Runs build routines with the ambient configuration restored afterwards.

    The state is captured on entry and restored exactly once on exit,
    whether the routine returns or raises. Failures are logged and always
    propagate. The guard protects sequential use only; concurrent builds in
    one process are not supported.
    """

    def __init__(self, manager: PackageManager):
        """Initialize the sandbox.

        Args:
            manager: Package manager whose configuration is guarded
        """
        self.manager = manager
        self._state: Optional[GlobalPackageState] = None

    @property
    def active(self) -> bool:
        return self._state is not None

    def __enter__(self) -> "Sandbox":
        if self._state is not None:
            raise RuntimeError("Sandbox is already active")
        self._state = GlobalPackageState.capture(self.manager)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        state, self._state = self._state, None
        if exc is not None:
            logger.warning(f"Depot build sandbox failed: {exc_type.__name__}: {exc}")
        state.restore(self.manager)
        return False

    def run(self, routine: Callable[[], T]) -> T:
        """Execute ``routine`` inside the guard and return its result."""
        with self:
            return routine()
