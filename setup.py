from setuptools import setup, find_packages
import pathlib, os

# Detect layout
use_src = pathlib.Path("src/pomtools").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="pom-tools",
    version="0.1.0",
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2",
        "typer",
        "PyYAML",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["pom-tools=pomtools.cli:app"]},
    **pkg_args
)
