[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "asl"
version = "1.0.0"
description = "All-purpose simple library: SHA-1, paths, factories, a tiny test registry, 4x4 matrices, processes, logging, INI files, sockets, serial ports and shared memory"
requires-python = ">=3.10"
keywords = [
    "utilities",
    "sha1",
    "ini",
    "logging",
    "sockets",
    "multicast",
    "serial",
    "shared-memory",
    "matrix",
    "quaternion",
    "factory",
    "process",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Networking",
    "Topic :: System :: Logging",
]
dependencies = [
    "pyserial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["asl"]

[tool.hatch.build.targets.sdist]
include = ["asl", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
