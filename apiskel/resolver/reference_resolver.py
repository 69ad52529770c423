"""Reference resolver — bind module files from a search path.

Search-path entries are directories or single files. Every directory seen
becomes a probe directory; probing tries them in registration order and the
first directory holding ``<name><ext>`` wins. A file name is bound at most
once: a later file with the same name on another path is ignored, because
two bindings cannot claim the same identity.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from apiskel.resolver.identity import MismatchNotice, match_identity
from apiskel.symbols.models import Diagnostic, LoadedModule, ModuleIdentity, ModuleSymbol
from apiskel.symbols.universe import SymbolUniverse

log = logging.getLogger(__name__)

SEARCH_PATH_SEPARATORS = re.compile(r"[,;]")


def split_search_path(paths: str | None) -> list[str]:
    """Split a comma/semicolon-delimited search path, dropping empty entries."""
    if not paths:
        return []
    return [p for p in SEARCH_PATH_SEPARATORS.split(paths) if p]


def expand_entry(entry: str) -> Path:
    return Path(os.path.expanduser(os.path.expandvars(entry)))


@dataclass
class ResolutionResult:
    """Outcome of resolving a batch of identities."""

    modules: list[ModuleSymbol] = field(default_factory=list)
    notices: list[MismatchNotice] = field(default_factory=list)
    unresolved: list[ModuleIdentity] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.unresolved


class ReferenceResolver:
    """Resolves module identities against an ordered list of probe directories."""

    def __init__(self, universe: SymbolUniverse):
        self.universe = universe
        self._loaded: dict[str, LoadedModule | None] = {}
        self._probe_dirs: list[Path] = []

    @property
    def extension(self) -> str:
        return self.universe.reader.extension

    @property
    def probe_directories(self) -> list[Path]:
        return list(self._probe_dirs)

    def register_search_path(self, paths: str | None) -> list[LoadedModule]:
        """Register directories/files as probe locations and bind what they hold.

        Entries that are neither an existing directory nor an existing file
        are skipped silently.
        """
        bound = []
        for entry in split_search_path(paths):
            resolved = expand_entry(entry)
            if resolved.is_dir():
                self._probe_dirs.append(resolved)
                bound.extend(self._bind_directory(resolved))
            elif resolved.is_file():
                self._probe_dirs.append(resolved.parent)
                loaded = self.bind_if_absent(resolved)
                if loaded:
                    bound.append(loaded)
            else:
                log.debug("Skipping search path entry %r: not found", entry)
        return bound

    def load_modules(self, paths: str | None) -> list[ModuleSymbol]:
        """Register ``paths`` and return the module symbols they contain."""
        return [loaded.symbol for loaded in self.register_search_path(paths)]

    def bind_if_absent(self, path: str | Path) -> LoadedModule | None:
        """Bind a module file unless one with the same file name is bound."""
        path = Path(path)
        if path.name in self._loaded:
            existing = self._loaded[path.name]
            if existing is not None and existing.path != str(path):
                log.debug("Ignoring %s: %s is already bound from %s", path, path.name, existing.path)
            return existing

        loaded = self.universe.bind(path)
        self._loaded[path.name] = loaded
        return loaded

    def resolve(self, identities: list[ModuleIdentity]) -> ResolutionResult:
        """Resolve each identity, in order, to a bound module symbol.

        Unresolved identities are left out of ``modules`` and listed in
        ``unresolved``; deciding whether that is fatal is up to the caller.
        """
        result = ResolutionResult()
        for identity in identities:
            probed = self._probe(identity)
            if probed is None:
                log.debug("Could not find %s on the search path", identity)
                result.unresolved.append(identity)
                continue

            match = match_identity(identity, self.universe, probed)
            if not match.resolved:
                result.unresolved.append(identity)
                continue

            for notice in match.notices:
                log.warning("%s", notice)
            result.notices.extend(match.notices)
            result.modules.append(match.module.symbol)

        return result

    def has_diagnostics(self) -> tuple[bool, list[Diagnostic]]:
        return self.universe.has_diagnostics()

    def _probe(self, identity: ModuleIdentity) -> LoadedModule | None:
        file_name = identity.name + self.extension
        for probe_dir in self._probe_dirs:
            candidate = probe_dir / file_name
            if not candidate.is_file():
                continue
            loaded = self.bind_if_absent(candidate)
            if loaded is not None:
                return loaded
        return None

    def _bind_directory(self, directory: Path) -> list[LoadedModule]:
        bound = []
        for path in sorted(directory.glob("*" + self.extension)):
            if not path.is_file():
                continue
            loaded = self.bind_if_absent(path)
            if loaded:
                bound.append(loaded)
        return bound
