"""Runtime configuration for apiskel.

Values come from keyword overrides first, then environment variables,
then the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

REFERENCE_PATH_ENV = "APISKEL_REFERENCE_PATH"
EXTENSION_ENV = "APISKEL_MODULE_EXTENSION"


@dataclass
class ApiskelConfig:
    """Settings shared by the resolver, the walker and the CLI."""

    module_extension: str = ".yaml"
    reference_path: str = ""
    fail_on_unresolved: bool = False
    newline: str = "\n"
    indent: str = "    "

    def __post_init__(self):
        if self.module_extension and not self.module_extension.startswith("."):
            self.module_extension = "." + self.module_extension

    @classmethod
    def from_env(cls, **overrides) -> ApiskelConfig:
        values = {
            "module_extension": os.environ.get(EXTENSION_ENV) or None,
            "reference_path": os.environ.get(REFERENCE_PATH_ENV) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise TypeError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

        return cls(**{k: v for k, v in values.items() if v is not None})
