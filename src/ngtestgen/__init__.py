"""ngtestgen: unit test scaffolding for Angular workspaces."""

from importlib.metadata import version

from .pipeline import run

__all__ = ["run"]

__version__ = version("ngtestgen")
