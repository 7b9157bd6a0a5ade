"""Declaration scanner.

Classifies the top-level statements of a parsed module using only their
syntactic shape: annotated handler methods on one side, field-aggregate
classes on the other.
"""

import ast
from collections.abc import Iterator

from .base import MARKER


def scan_handlers(tree: ast.Module) -> Iterator[tuple[str, ast.FunctionDef]]:
    """Yield (receiver class name, method) for every marker-annotated method."""
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        for item in node.body:
            if not isinstance(item, ast.FunctionDef):
                continue
            doc = ast.get_docstring(item)
            if doc is None or not doc.startswith(MARKER):
                continue
            yield node.name, item


def scan_types(tree: ast.Module) -> Iterator[ast.ClassDef]:
    """Yield every top-level class shaped like a field aggregate."""
    for node in tree.body:
        if isinstance(node, ast.ClassDef) and _is_field_aggregate(node):
            yield node


def iter_fields(node: ast.ClassDef) -> Iterator[ast.AnnAssign]:
    """Yield the annotated instance fields of a class in declaration order."""
    for item in node.body:
        if not isinstance(item, ast.AnnAssign) or not isinstance(item.target, ast.Name):
            continue
        if _is_classvar(item.annotation):
            continue
        yield item


def _is_field_aggregate(node: ast.ClassDef) -> bool:
    if any(_is_dataclass_decorator(d) for d in node.decorator_list):
        return True
    if any(True for _ in iter_fields(node)):
        return True
    # a class body without methods declares an aggregate with no fields
    return not any(isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)) for item in node.body)


def _is_dataclass_decorator(node: ast.expr) -> bool:
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id == "dataclass"
    if isinstance(node, ast.Attribute):
        return node.attr == "dataclass"
    return False


def _is_classvar(annotation: ast.expr) -> bool:
    if isinstance(annotation, ast.Subscript):
        annotation = annotation.value
    if isinstance(annotation, ast.Name):
        return annotation.id == "ClassVar"
    if isinstance(annotation, ast.Attribute):
        return annotation.attr == "ClassVar"
    return False
