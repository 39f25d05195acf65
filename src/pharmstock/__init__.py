from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pharmstock")
except PackageNotFoundError:
    __version__ = "0+unknown"
