"""Field rule extraction from request-parameter classes.

Rules come from the `apivalidator` entry of a dataclass field's metadata::

    login: str = field(default="", metadata={"apivalidator": "required,min=10"})

Directives are comma separated: `required`, `paramname=`, `default=`,
`enum=a|b|c`, `min=` and `max=`. Unknown directives are ignored.
"""

import ast
import re

from apigen.errors import FieldTypeError, TagValueError

from .base import TAG_KEY, FieldKind, FieldRule
from .methods import simple_type_name
from .scanner import iter_fields

ENUM_SEPARATOR = "|"

_DECIMAL = re.compile(r"[+-]?[0-9]+")


def extract_rules(node: ast.ClassDef, filename: str = "<source>") -> list[FieldRule]:
    """Return the rules of every field of a request class, in declaration order."""
    return [_field_rule(item, filename) for item in iter_fields(node)]


def parse_tag(tag: str, field_name: str, kind: FieldKind) -> FieldRule:
    """Decode a directive string into a FieldRule.

    Raises TagValueError when `min` or `max` is not a decimal integer.
    """
    rule = {
        "source_field_name": field_name,
        "external_name": field_name.lower(),
        "kind": kind,
    }
    for directive in tag.split(","):
        key, sep, value = directive.strip().partition("=")
        if not sep:
            if key == "required":
                rule["required"] = True
            continue
        if key == "paramname":
            if value:
                rule["external_name"] = value
        elif key == "default":
            rule["default_value"] = value
        elif key == "enum":
            rule["enum_values"] = tuple(value.split(ENUM_SEPARATOR))
        elif key in ("min", "max"):
            if not _DECIMAL.fullmatch(value):
                raise TagValueError(f"{key}={value!r} on field {field_name!r} is not an integer")
            try:
                rule[key] = int(value)
            except ValueError:
                raise TagValueError(f"{key}={value[:20]}... on field {field_name!r} is too long") from None
    return FieldRule(**rule)


def _field_rule(item: ast.AnnAssign, filename: str) -> FieldRule:
    name = item.target.id
    kind = _field_kind(item, filename)
    tag = _field_tag(item, filename)
    try:
        return parse_tag(tag or "", name, kind)
    except TagValueError as e:
        e.filename, e.lineno = filename, item.lineno
        raise


def _field_kind(item: ast.AnnAssign, filename: str) -> FieldKind:
    type_name = simple_type_name(item.annotation)
    for kind in FieldKind:
        if type_name == kind.value:
            return kind
    raise FieldTypeError(
        f"field {item.target.id!r} has type {ast.unparse(item.annotation)!r}, only str and int fields are supported",
        filename,
        item.lineno,
    )


def _field_tag(item: ast.AnnAssign, filename: str) -> str | None:
    """Return the tag string of a field, or None when it has none."""
    metadata = _metadata_literal(item.value)
    if metadata is None:
        return None
    for key, value in zip(metadata.keys, metadata.values):
        if not (isinstance(key, ast.Constant) and key.value == TAG_KEY):
            continue
        if isinstance(value, ast.Constant) and isinstance(value.value, str):
            return value.value
        raise TagValueError(
            f"{TAG_KEY} tag of field {item.target.id!r} must be a string literal",
            filename,
            item.lineno,
        )
    return None


def _metadata_literal(value: ast.expr | None) -> ast.Dict | None:
    if not isinstance(value, ast.Call):
        return None
    func = value.func
    is_field = (isinstance(func, ast.Name) and func.id == "field") or (
        isinstance(func, ast.Attribute) and func.attr == "field"
    )
    if not is_field:
        return None
    for keyword in value.keywords:
        if keyword.arg == "metadata" and isinstance(keyword.value, ast.Dict):
            return keyword.value
    return None
