"""ChainScout core — balance query pipeline and foundation systems."""

from importlib.metadata import version as _pkg_version

try:
    __version__: str = _pkg_version("chainscout")
except Exception:
    __version__ = "dev"
