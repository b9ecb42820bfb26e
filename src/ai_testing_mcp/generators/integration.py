"""
Integration test generation for HTTP endpoints.

Renders one smoke test per "METHOD /path" endpoint: jest + supertest for
JavaScript projects, pytest + requests for everything else. Path parameters
(``:id``, ``{id}``, ``<int:id>``) are filled with a placeholder value.
"""

import re

_PATH_PARAM = re.compile(r":\w+|\{[^}]+\}|<[^>]+>")
_NON_WORD = re.compile(r"\W+")

_BODY_METHODS = {"POST", "PUT", "PATCH"}


def concrete_path(path: str) -> str:
    """Replace path parameters with a sample value.

    Example:
        >>> concrete_path("/users/:id/posts/{post_id}")
        '/users/1/posts/1'
    """
    return _PATH_PARAM.sub("1", path)


def _split(endpoint: str) -> tuple[str, str]:
    method, _, path = endpoint.partition(" ")
    return method.upper(), path or "/"


def _slug(method: str, path: str) -> str:
    slug = _NON_WORD.sub("_", f"{method} {path}").strip("_").lower()
    return slug or method.lower()


def _javascript(endpoints: list[str]) -> str:
    lines = [
        "const request = require('supertest');",
        "// TODO: export your Express/Fastify app from this module",
        "const app = require('../app');",
        "",
    ]
    for endpoint in endpoints:
        method, path = _split(endpoint)
        call = f"request(app).{method.lower()}('{concrete_path(path)}')"
        if method in _BODY_METHODS:
            call += ".send({ /* TODO: request body */ })"
        lines.extend(
            [
                f"describe('{method} {path}', () => {{",
                "  test('responds without a server error', async () => {",
                f"    const response = await {call};",
                "    expect(response.status).toBeLessThan(500);",
                "  });",
                "});",
                "",
            ]
        )
    return "\n".join(lines)


def _python(endpoints: list[str]) -> str:
    lines = [
        "import os",
        "",
        "import requests",
        "",
        'BASE_URL = os.environ.get("API_BASE_URL", "http://localhost:8000")',
        "",
        "",
    ]
    for endpoint in endpoints:
        method, path = _split(endpoint)
        kwargs = "json={}, timeout=10" if method in _BODY_METHODS else "timeout=10"
        lines.extend(
            [
                f"def test_{_slug(method, path)}_responds():",
                f'    """{method} {path} responds without a server error."""',
                f'    response = requests.request("{method}", f"{{BASE_URL}}{concrete_path(path)}", {kwargs})',
                "    assert response.status_code < 500",
                "",
                "",
            ]
        )
    return "\n".join(lines).rstrip("\n") + "\n"


def generate_integration_tests(endpoints: list[str], language: str) -> str:
    """Render integration test skeletons for a list of endpoints.

    Args:
        endpoints: "METHOD /path" strings; duplicates are emitted once.
        language: Project language from analysis; "javascript" selects
            jest + supertest, anything else pytest + requests.

    Returns:
        Test file source, or a comment when there are no endpoints.

    Example:
        >>> "supertest" in generate_integration_tests(["GET /health"], "javascript")
        True
    """
    unique = list(dict.fromkeys(endpoints))
    comment = "//" if language == "javascript" else "#"
    if not unique:
        return (
            f"{comment} No API endpoints found. Pass an apiSpec listing endpoints "
            f'such as "GET /users" to generate integration tests.\n'
        )
    if language == "javascript":
        return _javascript(unique)
    return _python(unique)
