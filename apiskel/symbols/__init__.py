"""Symbols — the resolved, queryable form of compiled modules.

- models: module identities and the namespace/type/member symbol graph
- reader: the ModuleReader protocol and the bundled YAML manifest reader
- universe: the append-only store every bound module lives in
"""
