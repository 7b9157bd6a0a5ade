"""Preamble of a generated module: header, imports, constants and helpers."""

import json
import re

from apigen.config import AUTH_HEADER, AUTH_TOKEN

API_ERROR = "ApiError"

HEADER = "# Code generated by apigen from {source}. DO NOT EDIT."

_ENCODE = '''def _encode(value):
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if hasattr(value, "model_dump"):
        return value.model_dump()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")'''

_WRITE_JSON = '''def _write_json(start_response, status, payload):
    code = int(status)
    phrase = HTTPStatus(code).phrase if code in _STATUS_CODES else ""
    body = json.dumps(payload, default=_encode).encode("utf-8")
    start_response(
        f"{code} {phrase}",
        [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
    )
    return [body]'''

_QUERY_VALUES = '''def _request_values(environ):
    return parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)'''

# url-encoded body values come before query string values
_FORM_VALUES = '''def _request_values(environ):
    values = {}
    if environ.get("CONTENT_TYPE", "").startswith("application/x-www-form-urlencoded"):
        length = int(environ.get("CONTENT_LENGTH") or 0)
        body = environ["wsgi.input"].read(length).decode("utf-8", errors="replace")
        values = parse_qs(body, keep_blank_values=True)
    for key, items in parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True).items():
        values.setdefault(key, []).extend(items)
    return values'''

_ATOI = '''def _atoi(value):
    if not _DECIMAL.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        # longer than the interpreter's int string conversion limit
        return None'''


def literal(value: str) -> str:
    """Render a str as a double-quoted Python literal."""
    return json.dumps(value, ensure_ascii=False)


def snake(name: str) -> str:
    """CamelCase class name to snake_case, used to prefix generated functions."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])", "_", name).lower()


def environ_key(header: str) -> str:
    """WSGI environ key of an HTTP request header."""
    return "HTTP_" + header.upper().replace("-", "_")


def render_preamble(source: str, module: str, names: list[str], binding: str) -> list[str]:
    """Return the top-level chunks every generated module starts with."""
    imported = ", ".join(dict.fromkeys([API_ERROR, *names]))
    head = "\n".join([
        HEADER.format(source=source),
        "",
        "import json",
        "import re",
        "from dataclasses import asdict, is_dataclass",
        "from http import HTTPStatus",
        "from urllib.parse import parse_qs",
        "",
        f"from {module} import {imported}",
        "",
        f"AUTH_HEADER = {literal(environ_key(AUTH_HEADER))}",
        f"AUTH_TOKEN = {literal(AUTH_TOKEN)}",
        "",
        '_DECIMAL = re.compile(r"[+-]?[0-9]+")',
        "_STATUS_CODES = frozenset(HTTPStatus)",
    ])
    values = _FORM_VALUES if binding == "form" else _QUERY_VALUES
    return [head, _ENCODE, _WRITE_JSON, values, _ATOI]
