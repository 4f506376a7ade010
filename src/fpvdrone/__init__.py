"""fpvdrone - FPV drone flight simulator core."""

from fpvdrone.version import __version__

__all__ = ["__version__"]
