[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcamctl"
version = "0.1.0"
description = "Serial control and telemetry logging for a BUMP controller board, with XML configuration, logging and small image and integer utilities."
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = [
    "camera",
    "serial",
    "telemetry",
    "xml-configuration",
    "pgm",
    "instrument-control",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Capture :: Digital Camera",
    "Topic :: Scientific/Engineering",
    "Topic :: Terminals :: Serial",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pcamctl"]

[tool.pytest.ini_options]
addopts = "-ra"
