"""Validation routine emission for request-parameter classes.

Checks run per field in a fixed order: required, default, enum, then the
length check for text or parse/min/max for integers. Defaulting comes first
so a default value goes through the same checks as a submitted one.
"""

from apigen.parser.base import FieldKind, FieldRule

from .runtime import literal, snake


def validator_name(request_type: str) -> str:
    return f"_{snake(request_type)}_validate_params"


def render_validator(request_type: str, rules: list[FieldRule]) -> list[str]:
    """Return the validation function of a request class and its binding."""
    lines = [
        f"def {validator_name(request_type)}(params, environ):",
        "    values = _request_values(environ)",
    ]
    for rule in rules:
        lines.append("")
        lines.extend(render_field(rule))
    binding = f"{request_type}.validate_params = {validator_name(request_type)}"
    return ["\n".join(lines), binding]


def render_field(rule: FieldRule) -> list[str]:
    name = rule.external_name
    lines = [f"    value = values.get({literal(name)}, [{literal('')}])[0]"]
    if rule.required:
        lines.extend(_fail_if("not value", f"{name} must not be empty"))
    if rule.default_value:
        lines.append("    if not value:")
        lines.append(f"        value = {literal(rule.default_value)}")
    if rule.enum_values:
        allowed = ", ".join(literal(v) for v in rule.enum_values)
        message = f"{name} must be one of [{', '.join(rule.enum_values)}]"
        lines.extend(_fail_if(f"value not in [{allowed}]", message))

    if rule.kind is FieldKind.TEXT:
        if rule.min:
            lines.extend(_fail_if(f"len(value) < {rule.min}", f"{name} len must be >= {rule.min}"))
        lines.append(f"    params.{rule.source_field_name} = value")
        return lines

    lines.append("    number = _atoi(value)")
    lines.extend(_fail_if("number is None", f"{name} must be int"))
    lines.extend(_fail_if(f"number < {rule.min}", f"{name} must be >= {rule.min}"))
    if rule.max:
        lines.extend(_fail_if(f"number > {rule.max}", f"{name} must be <= {rule.max}"))
    lines.append(f"    params.{rule.source_field_name} = number")
    return lines


def _fail_if(condition: str, message: str) -> list[str]:
    return [
        f"    if {condition}:",
        f"        raise ApiError(HTTPStatus.BAD_REQUEST, {literal(message)})",
    ]
