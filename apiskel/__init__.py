"""apiskel — API skeleton generator for compiled library modules."""

__version__ = "0.1.0"
