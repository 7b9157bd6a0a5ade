"""Dispatch and wrapper emission for receiver classes.

Each receiver gets a WSGI entry point that routes on PATH_INFO, checks the
verb and the auth header, then hands over to one wrapper per handler::

    def _my_api_serve_http(srv, environ, start_response):
        path = environ.get("PATH_INFO", "")
        if path == "/user/profile":
            ...
            return _my_api_wrap_profile(srv, environ, start_response)
        return _write_json(start_response, HTTPStatus.NOT_FOUND, {"error": "unknown method"})
"""

from apigen.parser.base import MethodDescriptor

from .runtime import literal, snake

NOT_FOUND = "unknown method"
BAD_METHOD = "bad method"
UNAUTHORIZED = "unauthorized"


def serve_http_name(receiver: str) -> str:
    return f"_{snake(receiver)}_serve_http"


def wrapper_name(descriptor: MethodDescriptor) -> str:
    return f"_{snake(descriptor.receiver_type)}_wrap_{descriptor.method_name}"


def render_receiver(receiver: str, descriptors: list[MethodDescriptor]) -> list[str]:
    """Return the dispatch routine, the wrappers and the class bindings of one receiver."""
    chunks = [render_dispatch(receiver, descriptors)]
    chunks.extend(render_wrapper(d) for d in descriptors)
    chunks.append(render_bindings(receiver, descriptors))
    return chunks


def render_dispatch(receiver: str, descriptors: list[MethodDescriptor]) -> str:
    """Render the routing function of a receiver.

    Routes are tested in declaration order, so the first of two identical
    routes wins. A handler without its own verb inherits the last verb
    declared by an earlier handler of the same receiver.
    """
    lines = [
        f"def {serve_http_name(receiver)}(srv, environ, start_response):",
        '    path = environ.get("PATH_INFO", "")',
    ]
    verb = ""
    for d in descriptors:
        verb = d.verb or verb
        lines.append(f"    if path == {literal(d.route)}:")
        if verb:
            lines.append(f'        if environ.get("REQUEST_METHOD") != {literal(verb)}:')
            lines.append(f"            {_error_response('METHOD_NOT_ALLOWED', BAD_METHOD)}")
        if d.requires_auth:
            lines.append("        if environ.get(AUTH_HEADER) != AUTH_TOKEN:")
            lines.append(f"            {_error_response('FORBIDDEN', UNAUTHORIZED)}")
        lines.append(f"        return {wrapper_name(d)}(srv, environ, start_response)")
    lines.append(f"    {_error_response('NOT_FOUND', NOT_FOUND)}")
    return "\n".join(lines)


def render_wrapper(d: MethodDescriptor) -> str:
    """Render the wrapper binding, validating and invoking one handler."""
    failure = 'return _write_json(start_response, err.http_status, {"error": str(err)})'
    return "\n".join([
        f"def {wrapper_name(d)}(srv, environ, start_response):",
        f"    params = {d.request_type}()",
        "    try:",
        "        params.validate_params(environ)",
        "    except ApiError as err:",
        f"        {failure}",
        "    try:",
        f"        result = srv.{d.method_name}(environ, params)",
        "    except ApiError as err:",
        f"        {failure}",
        "    except Exception as err:",
        '        return _write_json(start_response, HTTPStatus.INTERNAL_SERVER_ERROR, {"error": str(err)})',
        '    return _write_json(start_response, HTTPStatus.OK, {"error": "", "response": result})',
    ])


def render_bindings(receiver: str, descriptors: list[MethodDescriptor]) -> str:
    lines = [
        f"{receiver}.serve_http = {serve_http_name(receiver)}",
        f"{receiver}.__call__ = {serve_http_name(receiver)}",
    ]
    lines.extend(f"{receiver}.wrap_{d.method_name} = {wrapper_name(d)}" for d in descriptors)
    return "\n".join(lines)


def _error_response(status: str, message: str) -> str:
    return f'return _write_json(start_response, HTTPStatus.{status}, {{"error": {literal(message)}}})'
