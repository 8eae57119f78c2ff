#!/usr/bin/env python3
"""
Example usage script for depot-delivery.

This script demonstrates how to:
1. Build a depot for a project
2. Check the depot for foreign native artifacts
3. Load the depot in a fresh, isolated interpreter

Usage:
    python examples/example_usage.py PROJECT_DIR [PLATFORM_TAG]
"""

import logging
import sys
from pathlib import Path

from depot_delivery import (
    ArtifactVerifier,
    DepotBuilder,
    DepotError,
    Platform,
    TestRunner,
)
from depot_delivery.verify import excluded_extensions_for


def main():
    """Build and test a depot for the project given on the command line."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) < 2:
        print(__doc__)
        return 2

    project = Path(sys.argv[1])
    platform = Platform.parse(sys.argv[2] if len(sys.argv) > 2 else None)

    print("=" * 60)
    print("depot-delivery - Example Usage")
    print("=" * 60)
    print()

    print(f"1. Building depot for {project} (platform {platform})...")
    try:
        depot = DepotBuilder().build(project, platform=platform)
        print(f"   ✓ Depot written to {depot}")
        print()
    except DepotError as e:
        print(f"   ✗ Failed to build depot: {e}")
        return 1

    print("2. Scanning for foreign native artifacts...")
    found = ArtifactVerifier().find_unexpected(depot, excluded_extensions_for(platform))
    if found:
        for path in found[:5]:
            print(f"   ! {path.relative_to(depot)}")
    else:
        print("   ✓ No foreign artifacts")
    print()

    if not platform.is_host:
        print("3. Skipping load test for a foreign platform")
        return 0

    print("3. Loading the depot in an isolated interpreter...")
    if TestRunner().run(depot):
        print("   ✓ Depot loads on its own")
        return 0
    print("   ✗ Depot failed to load")
    return 1


if __name__ == "__main__":
    sys.exit(main())
