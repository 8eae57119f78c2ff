"""Generator for the self-relocating depot startup script."""

import re
from string import Template

from depot_delivery.errors import ConfigurationError
from depot_delivery.layout import DEV_DIR, PACKAGES_DIR

_SCRIPT = Template('''\
"""Startup script for depot project $name_literal."""
import os
import site
import sys

depot = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
packages = os.path.join(depot, $packages_literal)
project = os.path.join(depot, $dev_literal, $name_literal)
source = os.path.join(project, "src")
if not os.path.isdir(source):
    source = project

sys.path[:0] = [source, packages]
site.addsitedir(packages)  # picks up linked path dependencies
# Worker processes
inside = [p for p in sys.path if p == depot or p.startswith(depot + os.sep)]
os.environ["PYTHONPATH"] = os.pathsep.join(inside)
os.environ["DEPOT_PROJECT"] = project
print(f"Initializing depot {depot!r} with project " + $name_literal + ".", file=sys.stderr)

import $module
''')


class StartupScriptGenerator:
    """Produces the startup script embedded in ``config/`` of a depot."""

    @staticmethod
    def module_name(name: str) -> str:
        """Import name for a project name.

        Raises:
            ConfigurationError: If the name cannot be imported as a module
        """
        module = re.sub(r"[-.]", "_", name)
        if not module.isidentifier():
            raise ConfigurationError(
                f"Project name {name!r} does not map to an importable module"
            )
        return module

    def generate(self, name: str) -> str:
        """Return the startup script text for project ``name``."""
        return _SCRIPT.substitute(
            name_literal=repr(name),
            dev_literal=repr(DEV_DIR),
            packages_literal=repr(PACKAGES_DIR),
            module=self.module_name(name),
        )
