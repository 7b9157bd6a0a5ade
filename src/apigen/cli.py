"""CLI entry point for apigen."""

import json
from pathlib import Path

import click
import yaml

from apigen.config import GeneratorConfig, load_config
from apigen.errors import GeneratorError
from apigen.generator.driver import generate, inspect_source


def _load(config_path: Path | None, binding: str | None, module: str | None) -> GeneratorConfig:
    try:
        return load_config(config_path, binding=binding, module=module)
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e


def _generate(source_path: Path, config: GeneratorConfig) -> str:
    source = source_path.read_text(encoding="utf-8")
    try:
        return generate(source, config, filename=str(source_path))
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e


config_option = click.option(
    "--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file with an 'apigen' section.",
)
binding_option = click.option(
    "--binding", default=None, type=click.Choice(["query", "form"]),
    help="Where generated validators read parameters from.",
)
module_option = click.option(
    "--module", default=None, help="Import name of the source module (default: source file stem).",
)


@click.group()
def main():
    """apigen — generate WSGI dispatch and parameter validation from annotated handlers."""
    pass


@main.command(name="generate")
@click.argument("source_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@config_option
@binding_option
@module_option
def generate_cmd(source_path: Path, output_path: Path, config_path: Path | None, binding: str | None, module: str | None):
    """Generate the handler module for SOURCE_PATH into OUTPUT_PATH."""
    config = _load(config_path, binding, module)
    click.echo(f"Scanning {source_path} (binding: {config.binding})...")
    code = _generate(source_path, config)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(code, encoding="utf-8")
    click.echo(f"Generated {output_path}")


@main.command()
@click.argument("source_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@config_option
@binding_option
@module_option
def check(source_path: Path, output_path: Path, config_path: Path | None, binding: str | None, module: str | None):
    """Fail when OUTPUT_PATH is missing or out of date with SOURCE_PATH."""
    config = _load(config_path, binding, module)
    code = _generate(source_path, config)

    if not output_path.exists():
        raise click.ClickException(f"{output_path} does not exist, run 'apigen generate'")
    if output_path.read_text(encoding="utf-8") != code:
        raise click.ClickException(f"{output_path} is out of date, run 'apigen generate'")
    click.echo(f"{output_path} is up to date")


@main.command(name="inspect")
@click.argument("source_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", default="yaml", type=click.Choice(["yaml", "json"]), help="Output format.")
def inspect_cmd(source_path: Path, fmt: str):
    """Print the routes and field rules extracted from SOURCE_PATH."""
    source = source_path.read_text(encoding="utf-8")
    try:
        result = inspect_source(source, filename=str(source_path))
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e

    data = result.model_dump(mode="json")
    if fmt == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), nl=False)
