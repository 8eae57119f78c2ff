"""Guarding of process-wide package-manager configuration during builds."""

from depot_delivery.sandbox.guard import Sandbox
from depot_delivery.sandbox.state import GlobalPackageState

__all__ = [
    "GlobalPackageState",
    "Sandbox",
]
