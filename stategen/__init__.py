"""stategen - Reactive state container generator."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stategen")
except PackageNotFoundError:
    __version__ = "(local)"
