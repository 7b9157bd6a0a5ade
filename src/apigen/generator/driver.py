"""Emission driver: one source module in, one generated module out.

The phases always run in the same order: scan, extract method
descriptors, emit dispatch and wrappers, extract field rules for the
request classes actually referenced, emit validators.
"""

import ast
from pathlib import Path

from pydantic import BaseModel

from apigen.config import GeneratorConfig
from apigen.errors import ConfigError, OutputError, SourceError
from apigen.parser.base import FieldRule, ReceiverRoutes
from apigen.parser.fields import extract_rules
from apigen.parser.methods import group_by_receiver
from apigen.parser.scanner import scan_handlers, scan_types

from .dispatch import render_receiver, serve_http_name, wrapper_name
from .params import render_validator, validator_name
from .runtime import render_preamble
from .validator import missing_definitions, validate_python


class Inspection(BaseModel):
    """Everything extracted from a source module."""

    receivers: ReceiverRoutes
    request_rules: dict[str, list[FieldRule]]


def parse_source(source: str, filename: str = "<source>") -> ast.Module:
    try:
        return ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise SourceError(f"SyntaxError: {e.msg}", filename, e.lineno) from e


def inspect_source(source: str, filename: str = "<source>") -> Inspection:
    """Run the extraction phases only."""
    tree = parse_source(source, filename)
    routes = group_by_receiver(scan_handlers(tree), filename)
    rules = {name: extract_rules(node, filename) for name, node in _request_classes(tree, routes).items()}
    return Inspection(receivers=routes, request_rules=rules)


def generate(source: str, config: GeneratorConfig | None = None, filename: str = "<source>") -> str:
    """Generate the dispatch/validation module for one source module.

    Raises a GeneratorError subclass on any malformed input; nothing is
    returned in that case.
    """
    config = config or GeneratorConfig()
    module = _module_name(config, filename)
    tree = parse_source(source, filename)

    routes = group_by_receiver(scan_handlers(tree), filename)
    body: list[str] = []
    expected: list[str] = []
    for receiver, descriptors in routes.items():
        body.extend(render_receiver(receiver, descriptors))
        expected.append(serve_http_name(receiver))
        expected.extend(wrapper_name(d) for d in descriptors)

    for name, node in _request_classes(tree, routes).items():
        body.extend(render_validator(name, extract_rules(node, filename)))
        expected.append(validator_name(name))

    names = list(routes)
    names.extend(d.request_type for descriptors in routes.values() for d in descriptors)
    preamble = render_preamble(Path(filename).name, module, names, config.binding)
    code = "\n\n\n".join(preamble + body) + "\n"

    output_name = f"<generated from {filename}>"
    error = validate_python(code, output_name)
    if error:
        raise OutputError(error, output_name)
    missing = missing_definitions(code, expected)
    if missing:
        raise OutputError(f"missing definitions: {', '.join(missing)}", output_name)
    return code


def _request_classes(tree: ast.Module, routes: ReceiverRoutes) -> dict[str, ast.ClassDef]:
    """Field-aggregate classes referenced as a request type, by name.

    A later class of the same name shadows an earlier one, as it does at
    import time.
    """
    referenced = {d.request_type for descriptors in routes.values() for d in descriptors}
    classes: dict[str, ast.ClassDef] = {}
    for node in scan_types(tree):
        if node.name in referenced:
            classes[node.name] = node
    return classes


def _module_name(config: GeneratorConfig, filename: str) -> str:
    module = config.module or Path(filename).stem
    if not all(part.isidentifier() for part in module.split(".")):
        raise ConfigError(f"{module!r} is not an importable module name; set it with --module", filename)
    return module
