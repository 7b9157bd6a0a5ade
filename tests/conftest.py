import importlib
import io
import json
import sys
from pathlib import Path
from wsgiref.util import setup_testing_defaults

import pytest

from apigen.config import GeneratorConfig
from apigen.generator.driver import generate

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def handlers_source():
    return (FIXTURES / "handlers.py").read_text(encoding="utf-8")


@pytest.fixture
def load_generated(tmp_path, monkeypatch):
    """Generate code for fixtures/handlers.py and import it next to its source.

    Returns the imported source module, whose classes now carry the
    generated serve_http / wrap_* / validate_params attributes.
    """
    imported = []

    def _load(binding: str = "query"):
        source = (FIXTURES / "handlers.py").read_text(encoding="utf-8")
        (tmp_path / "handlers.py").write_text(source, encoding="utf-8")
        code = generate(source, GeneratorConfig(binding=binding, module="handlers"), filename="handlers.py")
        (tmp_path / "handlers_api.py").write_text(code, encoding="utf-8")

        monkeypatch.syspath_prepend(str(tmp_path))
        importlib.invalidate_caches()
        for name in ("handlers", "handlers_api"):
            sys.modules.pop(name, None)
            imported.append(name)
        module = importlib.import_module("handlers")
        importlib.import_module("handlers_api")
        return module

    yield _load
    for name in imported:
        sys.modules.pop(name, None)


def call_wsgi(app, method: str, path: str, query: str = "", headers: dict | None = None, form: str | bytes | None = None):
    """Drive a WSGI app once, returning (status code, decoded JSON body)."""
    environ = {"REQUEST_METHOD": method, "PATH_INFO": path, "QUERY_STRING": query}
    if form is not None:
        body = form.encode("utf-8") if isinstance(form, str) else form
        environ["CONTENT_TYPE"] = "application/x-www-form-urlencoded"
        environ["CONTENT_LENGTH"] = str(len(body))
        environ["wsgi.input"] = io.BytesIO(body)
    for name, value in (headers or {}).items():
        environ["HTTP_" + name.upper().replace("-", "_")] = value
    setup_testing_defaults(environ)

    captured = {}

    def start_response(status, response_headers):
        captured["status"] = status
        captured["headers"] = dict(response_headers)

    body = b"".join(app(environ, start_response))
    assert captured["headers"]["Content-Type"] == "application/json"
    return int(captured["status"].split()[0]), json.loads(body)


@pytest.fixture
def wsgi():
    return call_wsgi
