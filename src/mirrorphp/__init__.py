"""mirrorphp: static reflection of PHP classes and properties."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mirrorphp")
except PackageNotFoundError:
    __version__ = "dev"
