"""nwcompile - parallel C/C++ build driver for declaratively configured projects."""

__version__ = "0.1.0"

__all__ = ["__version__"]
