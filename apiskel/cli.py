"""apiskel CLI — the main entry point for the API skeleton generator."""

import io
import sys

import click
from rich.console import Console
from rich.table import Table

from apiskel import __version__
from apiskel.config import ApiskelConfig
from apiskel.errors import ApiskelError, ResolutionError
from apiskel.log import setup_logging

console = Console()
err_console = Console(stderr=True)


@click.group()
@click.version_option(version=__version__)
@click.option("--log-level", default=None, help="Logging level (default: $APISKEL_LOG_LEVEL or WARNING)")
def main(log_level: str | None):
    """apiskel — API skeleton generator.

    Reads the public surface of compiled library modules and writes it
    back as minimal, deterministic declaration source: types, members and
    signatures with every implementation body removed.
    """
    setup_logging(log_level)


# ── Generate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("modules")
@click.option("--references", "-r", default=None, help="Comma/semicolon-separated reference directories or files")
@click.option("--output", "-o", default=None, help="Output file (default: standard output)")
@click.option("--extension", "-e", default=None, help="Module file extension to probe (default: .yaml)")
@click.option("--strict/--no-strict", default=None, help="Fail when a referenced module cannot be resolved")
def generate(modules: str, references: str | None, output: str | None, extension: str | None, strict: bool | None):
    """Write the API skeleton of MODULES.

    MODULES is a comma/semicolon-separated list of module files or
    directories. References of those modules are resolved against
    --references before anything is written.
    """
    from apiskel.surface.walker import SourceWriter

    config = ApiskelConfig.from_env(
        module_extension=extension,
        reference_path=references,
        fail_on_unresolved=strict,
    )

    try:
        subjects = _load_and_resolve(modules, config)
    except ResolutionError as e:
        err_console.print(f"[red]{e}[/]")
        sys.exit(1)

    if subjects is None:
        sys.exit(1)

    # Render fully before touching the sink so a failure leaves no partial output.
    buffer = io.StringIO()
    writer = SourceWriter(buffer, config=config)
    try:
        for module in subjects:
            writer.write_module(module)
    except ApiskelError as e:
        err_console.print(f"[red]Failed to generate skeleton:[/] {e}")
        sys.exit(1)

    with click.open_file(output or "-", "w") as out:
        out.write(buffer.getvalue())


def _load_and_resolve(modules: str, config: ApiskelConfig):
    """Load subject modules, resolve their references, check diagnostics.

    Returns the subject module symbols, or None when diagnostics were
    reported.
    """
    resolver = _make_resolver(config)
    resolver.register_search_path(config.reference_path)

    subjects = resolver.load_modules(modules)
    if not subjects:
        raise ResolutionError(f"No modules were found in: {modules}")

    subject_names = {m.identity.name for m in subjects}
    identities = []
    for module in subjects:
        for identity in module.references:
            if identity.name not in subject_names and identity not in identities:
                identities.append(identity)

    result = resolver.resolve(identities)
    for identity in result.unresolved:
        err_console.print(f"[yellow]![/] Could not resolve reference '{identity}'.")
    if result.unresolved and config.fail_on_unresolved:
        raise ResolutionError(
            f"{len(result.unresolved)} reference(s) could not be resolved (strict mode)."
        )

    has_diagnostics, diagnostics = resolver.has_diagnostics()
    if has_diagnostics:
        for diagnostic in diagnostics:
            err_console.print(str(diagnostic), markup=False, highlight=False)
        return None

    return subjects


def _make_resolver(config: ApiskelConfig):
    from apiskel.resolver.reference_resolver import ReferenceResolver
    from apiskel.symbols.reader import ManifestReader
    from apiskel.symbols.universe import SymbolUniverse

    universe = SymbolUniverse(ManifestReader(extension=config.module_extension))
    return ReferenceResolver(universe)


# ── Resolve ──────────────────────────────────────────────────────────


@main.command()
@click.argument("identities", nargs=-1, required=True)
@click.option("--references", "-r", default=None, help="Comma/semicolon-separated reference directories or files")
@click.option("--extension", "-e", default=None, help="Module file extension to probe (default: .yaml)")
def resolve(identities: tuple, references: str | None, extension: str | None):
    """Resolve module IDENTITIES against the reference path.

    Each identity is written as 'Name[, Version=1.0.0.0][, PublicKeyToken=...]'.
    """
    from apiskel.symbols.models import ModuleIdentity

    config = ApiskelConfig.from_env(module_extension=extension, reference_path=references)

    try:
        requested = [ModuleIdentity.parse(text) for text in identities]
    except ValueError as e:
        err_console.print(f"[red]Invalid identity:[/] {e}")
        sys.exit(1)

    resolver = _make_resolver(config)
    resolver.register_search_path(config.reference_path)
    result = resolver.resolve(requested)

    # result.modules follows request order with unresolved entries left out.
    found = iter(result.modules)
    unresolved = list(result.unresolved)

    table = Table(title=f"Resolution ({len(result.modules)}/{len(requested)} resolved)")
    table.add_column("Name", style="cyan")
    table.add_column("Requested")
    table.add_column("Found")
    table.add_column("Path")
    table.add_column("Status", justify="center")

    for identity in requested:
        if identity in unresolved:
            unresolved.remove(identity)
            table.add_row(identity.name, identity.version_string, "-", "-", "[red]missing[/]")
            continue
        module = next(found)
        mismatched = any(n.name == module.identity.name for n in result.notices)
        status = "[yellow]mismatch[/]" if mismatched else "[green]ok[/]"
        table.add_row(
            identity.name,
            identity.version_string,
            module.identity.version_string,
            module.path,
            status,
        )

    # Mismatch notices were already logged by the resolver.
    console.print(table)

    has_diagnostics, diagnostics = resolver.has_diagnostics()
    if has_diagnostics:
        for diagnostic in diagnostics:
            err_console.print(str(diagnostic), markup=False, highlight=False)
        sys.exit(1)

    if result.unresolved:
        sys.exit(1)


if __name__ == "__main__":
    main()
