"""Exception hierarchy for apiskel.

Recoverable conditions (unresolved identities, version or key mismatches)
are reported as values. Exceptions are reserved for conditions a run
cannot continue past.
"""


class ApiskelError(Exception):
    """Base class for all apiskel errors."""


class ModuleReadError(ApiskelError):
    """A module file could not be read into a symbol graph."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class RewriteError(ApiskelError):
    """A declaration tree violates the shape the rewriter relies on."""


class ResolutionError(ApiskelError):
    """A requested set of modules could not be satisfied."""
