"""Setup file for the depot-delivery package."""

from setuptools import setup, find_packages

setup(
    name="depot-delivery",
    version="0.1.0",
    description="Package a Python project and its dependency closure into a self-contained, relocatable depot",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    python_requires=">=3.11",
    install_requires=[
        "docker>=6.0.0",
        "PyYAML>=6.0",
        "toml>=0.10.2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
)
