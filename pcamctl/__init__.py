"""BUMP controller and PA200 serial logging, XML configuration, logging and file helpers."""

__version__ = "0.1.0"

__all__ = [
    "bump",
    "config",
    "helpers",
    "interface",
    "log",
    "minmax",
    "pa200",
    "pgm",
]