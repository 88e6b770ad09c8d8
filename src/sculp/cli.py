"""Sculp command line interface."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path

import click

from sculp import __version__
from sculp.ast_nodes import Expression
from sculp.config import SculpConfig, config_for
from sculp.errors import DiagnosticRenderer, SculpError
from sculp.lexer import Lexer
from sculp.parser import parse

SOURCE_SUFFIX = ".sculp"


def _source_files(path: Path) -> list[Path]:
    if path.is_dir():
        return sorted(path.rglob(f"*{SOURCE_SUFFIX}"))
    return [path]


def _load_config(path: Path) -> SculpConfig:
    try:
        return config_for(path)
    except ValueError as e:
        raise click.ClickException(f"invalid sculp.toml: {e}") from e


def _report(renderer: DiagnosticRenderer, error: SculpError) -> None:
    click.echo(renderer.render(error.diagnostic), err=True)


@click.group()
@click.version_option(__version__, prog_name="sculp")
@click.option("-v", "--verbose", is_flag=True, help="Log parser activity to stderr.")
def main(verbose: bool) -> None:
    """The Sculp language front end."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
def check(path: str) -> None:
    """Parse Sculp sources and report errors."""
    target = Path(path)
    config = _load_config(target)
    files = _source_files(target)
    if not files:
        click.echo(f"warning: no {SOURCE_SUFFIX} files found", err=True)
        return

    renderer = DiagnosticRenderer(color=True)
    failed = 0
    for source_file in files:
        try:
            parse(source_file.read_text(), config.procedures, filename=str(source_file))
        except SculpError as e:
            failed += 1
            _report(renderer, e)

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) failed to parse", err=True)
        raise SystemExit(1)
    click.echo(f"checked {len(files)} file(s): no errors")


@main.command(name="format")
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--check", is_flag=True, help="Check formatting without modifying files.")
@click.option("--stdin", "use_stdin", is_flag=True, help="Read from stdin, write to stdout.")
def format_cmd(path: str, check: bool, use_stdin: bool) -> None:
    """Rewrite Sculp sources in canonical form."""
    target = Path(path)
    config = _load_config(target)
    renderer = DiagnosticRenderer(color=True)

    if use_stdin:
        source = sys.stdin.read()
        renderer.add_source("<stdin>", source)
        try:
            tree = parse(source, config.procedures, filename="<stdin>")
        except SculpError as e:
            _report(renderer, e)
            raise SystemExit(1)
        formatted = f"{tree}\n"
        if check:
            if formatted != source:
                raise SystemExit(1)
        else:
            sys.stdout.write(formatted)
        return

    files = _source_files(target)
    if not files:
        click.echo(f"no {SOURCE_SUFFIX} files found", err=True)
        return

    needs_formatting = False
    for source_file in files:
        source = source_file.read_text()
        filename = str(source_file)
        try:
            tree = parse(source, config.procedures, filename=filename)
        except SculpError as e:
            _report(renderer, e)
            continue

        formatted = f"{tree}\n"
        if formatted != source:
            if check:
                click.echo(f"would reformat {filename}")
                needs_formatting = True
            else:
                source_file.write_text(formatted)
                click.echo(f"formatted {filename}")

    if check and needs_formatting:
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def view(file: str) -> None:
    """View the AST of a Sculp source file."""
    config = _load_config(Path(file))
    try:
        tree = parse(Path(file).read_text(), config.procedures, filename=file)
    except SculpError as e:
        _report(DiagnosticRenderer(color=True), e)
        raise SystemExit(1)

    _dump_ast(tree, 0)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file: str) -> None:
    """List the tokens of a Sculp source file."""
    config = _load_config(Path(file))
    lexer = Lexer(Path(file).read_text(), file, config.procedures)
    try:
        for tok in lexer.tokens():
            click.echo(
                f"{tok.span.start_line}:{tok.span.start_col}\t{tok.kind.name}\t{tok.value!r}"
            )
    except SculpError as e:
        _report(DiagnosticRenderer(color=True), e)
        raise SystemExit(1)


@main.command()
def lsp() -> None:
    """Start the Sculp language server."""
    from sculp.lsp import main as lsp_main

    lsp_main()


def _dump_ast(node: Expression, depth: int) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth
    click.echo(f"{indent}{type(node).__name__}")
    for f in dataclasses.fields(node):
        if f.name == "span":
            continue
        value = getattr(node, f.name)
        if isinstance(value, Expression):
            click.echo(f"{indent}  {f.name}:")
            _dump_ast(value, depth + 2)
        elif isinstance(value, (list, dict)):
            items = list(value.values()) if isinstance(value, dict) else value
            if items:
                click.echo(f"{indent}  {f.name}:")
                for item in items:
                    _dump_ast(item, depth + 2)
            else:
                click.echo(f"{indent}  {f.name}: []")
        else:
            click.echo(f"{indent}  {f.name}: {value!r}")
