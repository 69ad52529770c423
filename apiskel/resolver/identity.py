"""Identity matching — pick the bound module for a requested identity.

Matching is by name only. Version and public key token differences are
reported as notices; they never make a match fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from apiskel.symbols.models import LoadedModule, ModuleIdentity
from apiskel.symbols.universe import SymbolUniverse


class MismatchKind(Enum):
    VERSION = "version"
    PUBLIC_KEY_TOKEN = "public_key_token"


LABELS = {
    MismatchKind.VERSION: "version",
    MismatchKind.PUBLIC_KEY_TOKEN: "PublicKeyToken",
}


@dataclass(frozen=True)
class MismatchNotice:
    """A non-fatal difference between the requested and the found module."""

    name: str
    kind: MismatchKind
    found: str
    requested: str

    def __str__(self) -> str:
        label = LABELS[self.kind]
        return f"Found '{self.name}' with {label} '{self.found}' instead of '{self.requested}'."


@dataclass
class MatchResult:
    requested: ModuleIdentity
    module: LoadedModule | None = None
    notices: list[MismatchNotice] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.module is not None


def match_identity(
    requested: ModuleIdentity,
    universe: SymbolUniverse,
    candidate: LoadedModule | None = None,
) -> MatchResult:
    """Classify ``candidate``, or the module bound under ``requested.name``.

    The resolver passes the module it probed and bound for the request so
    that exactly that file is classified. Performs no loading. Returns an
    unresolved result when there is nothing to classify.
    """
    loaded = candidate if candidate is not None else universe.find_module(requested.name)
    result = MatchResult(requested=requested, module=loaded)
    if loaded is None:
        return result

    found = loaded.symbol.identity
    if found.version != requested.version:
        result.notices.append(
            MismatchNotice(
                name=found.name,
                kind=MismatchKind.VERSION,
                found=found.version_string,
                requested=requested.version_string,
            )
        )

    found_token = found.key_token_hex
    requested_token = requested.key_token_hex
    if found_token != requested_token:
        result.notices.append(
            MismatchNotice(
                name=found.name,
                kind=MismatchKind.PUBLIC_KEY_TOKEN,
                found=found_token,
                requested=requested_token,
            )
        )

    return result
