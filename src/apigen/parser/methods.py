"""Method descriptor extraction from marker-annotated handler methods."""

import ast
from collections.abc import Iterable

from pydantic import ValidationError

from apigen.errors import AnnotationError, SignatureError

from .base import MARKER, ApiAnnotation, MethodDescriptor, ReceiverRoutes


def extract_descriptor(receiver: str, node: ast.FunctionDef, filename: str = "<source>") -> MethodDescriptor:
    """Build the descriptor of one scanned handler method.

    Raises AnnotationError when the marker payload does not decode and
    SignatureError when the request parameter cannot be resolved.
    """
    annotation = _decode_annotation(node, filename)
    return MethodDescriptor(
        receiver_type=receiver,
        request_type=_request_type_name(node, filename),
        method_name=node.name,
        route=annotation.url,
        verb=annotation.method,
        requires_auth=annotation.auth,
    )


def group_by_receiver(
    handlers: Iterable[tuple[str, ast.FunctionDef]], filename: str = "<source>"
) -> ReceiverRoutes:
    """Extract every handler and group the descriptors by receiver class.

    Receivers keep the order of their first handler, descriptors keep
    declaration order.
    """
    routes: ReceiverRoutes = {}
    for receiver, node in handlers:
        descriptor = extract_descriptor(receiver, node, filename)
        routes.setdefault(receiver, []).append(descriptor)
    return routes


def _decode_annotation(node: ast.FunctionDef, filename: str) -> ApiAnnotation:
    doc = ast.get_docstring(node) or ""
    # payload runs up to the first blank line, the rest is free-form docs
    payload = doc[len(MARKER):].split("\n\n", 1)[0].strip()
    try:
        return ApiAnnotation.model_validate_json(payload)
    except ValidationError as e:
        raise AnnotationError(
            f"invalid {MARKER} payload on {node.name}(): {payload!r} ({e.error_count()} errors)",
            filename,
            node.lineno,
        ) from e


def _request_type_name(node: ast.FunctionDef, filename: str) -> str:
    params = [*node.args.posonlyargs, *node.args.args][1:]  # drop self
    if len(params) < 2:
        raise SignatureError(
            f"{node.name}() must take a context and a request parameter after self",
            filename,
            node.lineno,
        )
    param = params[1]
    name = simple_type_name(param.annotation)
    if name is None:
        raise SignatureError(
            f"request parameter {param.arg!r} of {node.name}() must be annotated with a class name",
            filename,
            param.lineno,
        )
    return name


def simple_type_name(annotation: ast.expr | None) -> str | None:
    """Return the class name of a plain annotation, unwrapping one quoted level."""
    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        try:
            annotation = ast.parse(annotation.value, mode="eval").body
        except SyntaxError:
            return None
    if isinstance(annotation, ast.Name):
        return annotation.id
    return None
