"""Symbol universe — the append-only set of modules bound in this process.

Modules are only ever added. Read failures are kept as diagnostics and
reported as a whole rather than per call.
"""

from __future__ import annotations

import logging
from pathlib import Path

from apiskel.errors import ModuleReadError
from apiskel.symbols.models import Diagnostic, LoadedModule, ModuleSymbol, TypeSymbol
from apiskel.symbols.reader import ModuleReader

log = logging.getLogger(__name__)


class SymbolUniverse:
    """Holds every module bound so far and resolves symbols across them."""

    def __init__(self, reader: ModuleReader):
        self.reader = reader
        self._modules: list[LoadedModule] = []
        self._by_handle: dict[int, LoadedModule] = {}
        self._read_failures: list[Diagnostic] = []

    @property
    def modules(self) -> list[LoadedModule]:
        return list(self._modules)

    def bind(self, path: str | Path) -> LoadedModule | None:
        """Read a module file and bind it.

        Callers are responsible for not binding the same file name twice;
        the resolver's ``bind_if_absent`` is the only caller.
        """
        path = Path(path)
        try:
            symbol = self.reader.read_module(path)
        except ModuleReadError as e:
            log.debug("Failed to read %s: %s", path, e.message)
            self._read_failures.append(Diagnostic(path=e.path, message=e.message))
            return None

        handle = self.reader.bind_reference(symbol)
        loaded = LoadedModule(file_name=path.name, path=str(path), handle=handle, symbol=symbol)
        self._modules.append(loaded)
        self._by_handle[handle] = loaded
        log.debug("Bound %s (%s) as handle %d", path, symbol.identity, handle)
        return loaded

    def get_module_symbol(self, handle: int) -> ModuleSymbol | None:
        loaded = self._by_handle.get(handle)
        return loaded.symbol if loaded else None

    def find_module(self, name: str) -> LoadedModule | None:
        """First bound module whose identity carries this name.

        Falls back to the file name when no identity matches, so a module
        probed as `<name><ext>` is found even if it declares another name.
        """
        for loaded in self._modules:
            if loaded.symbol.identity.name == name:
                return loaded
        for loaded in self._modules:
            if loaded.file_name == name + self.reader.extension:
                return loaded
        return None

    def find_type(self, qualified_name: str) -> TypeSymbol | None:
        """Resolve a fully-qualified type name across all bound modules."""
        for loaded in self._modules:
            for type_symbol in loaded.symbol.global_namespace.all_types():
                found = _find_in(type_symbol, qualified_name)
                if found:
                    return found
        return None

    def diagnostics(self) -> list[Diagnostic]:
        return self._read_failures + self.reader.diagnostics()

    def has_diagnostics(self) -> tuple[bool, list[Diagnostic]]:
        diagnostics = self.diagnostics()
        return len(diagnostics) > 0, diagnostics


def _find_in(type_symbol: TypeSymbol, qualified_name: str) -> TypeSymbol | None:
    if type_symbol.qualified_name == qualified_name:
        return type_symbol
    for nested in type_symbol.nested_types:
        found = _find_in(nested, qualified_name)
        if found:
            return found
    return None
