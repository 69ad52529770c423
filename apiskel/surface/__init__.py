"""Surface walking — emit the visible declarations of a module."""

from apiskel.surface.walker import SourceWriter

__all__ = ["SourceWriter"]
