"""blockjava command line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from blockjava import __version__
from blockjava.blocks import Block
from blockjava.config import GeneratorConfig, find_config, load_config
from blockjava.errors import DiagnosticRenderer
from blockjava.generator import generate
from blockjava.loader import LoadError, load_workspace


def _load_config(workspace_path: Path, config_path: str | None) -> GeneratorConfig:
    if config_path is not None:
        return load_config(Path(config_path))
    try:
        return load_config(find_config(workspace_path))
    except FileNotFoundError:
        return GeneratorConfig()


def _quiet_diagnostic_logs() -> None:
    # compile renders diagnostics itself; their log copies show only with -v.
    logger = logging.getLogger("blockjava")
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.addHandler(logging.NullHandler())


def _highlight(code: str) -> str:
    from pygments import highlight
    from pygments.formatters import TerminalFormatter
    from pygments.lexers import JavaLexer

    return highlight(code, JavaLexer(), TerminalFormatter())


@click.group()
@click.version_option(__version__, prog_name="blockjava")
def main() -> None:
    """Compile Blockly workspaces into Java source."""


@main.command(name="compile")
@click.argument("workspace", type=click.Path(exists=True, dir_okay=False))
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write Java here instead of stdout.")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to blockjava.toml.")
@click.option("--app-name", default=None, help="Name of the generated class.")
@click.option("--package", default=None, help="Java package of the generated code.")
@click.option("--base-class", default=None, help="Class the generated class extends.")
@click.option("--import", "extra_imports", multiple=True, help="Extra import (repeatable).")
@click.option("--external-var-class", is_flag=True, help="Import Var instead of inlining it.")
@click.option("--wrap-class", is_flag=True, help="Wrap the output in a class declaration.")
@click.option("--color", is_flag=True, help="Syntax-highlight the Java output.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def compile_cmd(
    workspace: str,
    output: str | None,
    config_path: str | None,
    app_name: str | None,
    package: str | None,
    base_class: str | None,
    extra_imports: tuple[str, ...],
    external_var_class: bool,
    wrap_class: bool,
    color: bool,
    verbose: bool,
) -> None:
    """Generate Java from a workspace JSON file."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        _quiet_diagnostic_logs()

    path = Path(workspace)
    try:
        config = _load_config(path, config_path)
        blocks = load_workspace(path)
    except (LoadError, OSError, ValueError) as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    config = config.with_overrides(
        app_name=app_name,
        package=package,
        base_class=base_class,
        extra_imports=tuple(extra_imports) if extra_imports else None,
        inline_var_class=False if external_var_class else None,
        wrap_class=True if wrap_class else None,
    )

    result = generate(blocks, config)

    renderer = DiagnosticRenderer(color=color)
    for diag in result.diagnostics:
        click.echo(renderer.render(diag), err=True)

    if output is not None:
        Path(output).write_text(result.code, encoding="utf-8")
        click.echo(f"wrote {output}")
    else:
        click.echo(_highlight(result.code) if color else result.code, nl=False)

    if not result.ok:
        raise SystemExit(1)


@main.command()
@click.argument("workspace", type=click.Path(exists=True, dir_okay=False))
def view(workspace: str) -> None:
    """Print the block tree of a workspace JSON file."""
    try:
        ws = load_workspace(Path(workspace))
    except (LoadError, OSError) as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)

    for var in ws.variables:
        click.echo(f"var {var.name}: {var.type or '?'}")
    for block in ws.blocks:
        _dump_block(block, 0)


def _dump_block(block: Block, depth: int) -> None:
    """Print a readable dump of a block chain."""
    indent = "  " * depth
    current = block
    seen: set[int] = set()
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        fields = " ".join(f"{k}={v!r}" for k, v in current.fields.items())
        click.echo(f"{indent}{current.type}" + (f" {fields}" if fields else ""))
        if current.comment:
            click.echo(f"{indent}  // {current.comment}")
        for inp in current.inputs:
            if inp.block is None:
                click.echo(f"{indent}  {inp.name}: -")
            else:
                click.echo(f"{indent}  {inp.name}:")
                _dump_block(inp.block, depth + 2)
        current = current.next
