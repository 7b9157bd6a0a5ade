"""Structural checks on a generated module before it is written out."""

import ast


def validate_python(code: str, filename: str) -> str | None:
    """Check generated code for syntax errors.

    Returns an error message, or None when the code parses.
    """
    try:
        ast.parse(code, filename=filename)
    except SyntaxError as e:
        return f"SyntaxError: {e.msg} (line {e.lineno})"
    return None


def defined_functions(code: str) -> list[str]:
    """Names of the top-level functions of a module, in order."""
    tree = ast.parse(code)
    return [node.name for node in tree.body if isinstance(node, ast.FunctionDef)]


def missing_definitions(code: str, expected: list[str]) -> list[str]:
    """Return the expected function names the module does not define."""
    defined = set(defined_functions(code))
    return [name for name in expected if name not in defined]
