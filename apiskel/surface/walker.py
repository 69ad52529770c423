"""Surface walker — write the externally visible types of a module.

Namespaces are walked depth-first. Each namespace with at least one visible
type (public, protected or protected internal) is written as one group:
its types are drafted, wrapped in the namespace declaration, laid out,
canonicalized and serialized to the output stream.
"""

from __future__ import annotations

import io
import logging
import sys
from collections.abc import Callable
from typing import TextIO

from apiskel.config import ApiskelConfig
from apiskel.symbols.models import ModuleSymbol, NamespaceSymbol, TypeSymbol
from apiskel.syntax.format import normalize_whitespace
from apiskel.syntax.nodes import Node
from apiskel.syntax.rewriter import CanonicalRewriter
from apiskel.syntax.synthesizer import DeclarationSynthesizer, namespace_declaration

log = logging.getLogger(__name__)

Synthesize = Callable[[TypeSymbol], Node]


class SourceWriter:
    """Streams canonical declarations for whole modules to ``out``."""

    def __init__(
        self,
        out: TextIO | None = None,
        synthesize: Synthesize | None = None,
        rewriter: CanonicalRewriter | None = None,
        config: ApiskelConfig | None = None,
    ):
        self.config = config or ApiskelConfig()
        self.out = out or sys.stdout
        self.synthesize = synthesize or DeclarationSynthesizer()
        self.rewriter = rewriter or CanonicalRewriter(newline=self.config.newline)

    def write_module(self, module: ModuleSymbol) -> None:
        log.debug("Writing surface of %s", module.identity)
        global_ns = module.global_namespace
        self._write_global_types(global_ns)
        self._write_namespaces(global_ns.get_namespace_members())

    def _write_global_types(self, namespace: NamespaceSymbol) -> None:
        for type_symbol in _visible_types(namespace):
            node = self._layout(self.synthesize(type_symbol))
            self._emit(node)

    def _write_namespaces(self, namespaces: list[NamespaceSymbol]) -> None:
        for namespace in namespaces:
            self._write_namespace(namespace)

    def _write_namespace(self, namespace: NamespaceSymbol) -> None:
        types = _visible_types(namespace)
        if types:
            declaration = namespace_declaration(
                namespace.display_name, [self.synthesize(t) for t in types]
            )
            self._emit(self._layout(declaration))

        self._write_namespaces(namespace.get_namespace_members())

    def _layout(self, node: Node) -> Node:
        node = normalize_whitespace(node, indent=self.config.indent, newline=self.config.newline)
        return node.with_trailing_trivia(self.config.newline)

    def _emit(self, node: Node) -> None:
        canonical = self.rewriter.rewrite(node)
        if canonical is not None:
            self.out.write(canonical.to_full_string())


def _visible_types(namespace: NamespaceSymbol) -> list[TypeSymbol]:
    return [t for t in namespace.get_type_members() if t.is_visible_outside_module]


def render_module(module: ModuleSymbol, config: ApiskelConfig | None = None) -> str:
    """Render a module's canonical surface to a string."""
    buffer = io.StringIO()
    SourceWriter(buffer, config=config).write_module(module)
    return buffer.getvalue()
