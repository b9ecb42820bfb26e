"""
Regex-based source scanning.

Extracts HTTP endpoints and function names from source text and classifies
file paths as source or test files. This is pattern matching, not parsing:
it is fast, language-agnostic and deliberately approximate.
"""

import re
from pathlib import PurePath

SOURCE_EXTENSIONS = frozenset({".js", ".ts", ".jsx", ".tsx", ".py", ".go", ".java", ".cpp", ".c"})
JS_EXTENSIONS = frozenset({".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs"})
PYTHON_EXTENSIONS = frozenset({".py"})

_HTTP_METHODS = "get|post|put|delete|patch"
_QUOTED = r"['\"`]([^'\"`]+)['\"`]"

# Express app/router calls and NestJS decorators
_JS_ENDPOINT_PATTERNS = (
    re.compile(rf"\bapp\.({_HTTP_METHODS})\(\s*{_QUOTED}", re.IGNORECASE),
    re.compile(rf"\brouter\.({_HTTP_METHODS})\(\s*{_QUOTED}", re.IGNORECASE),
    re.compile(rf"@({_HTTP_METHODS})\(\s*{_QUOTED}", re.IGNORECASE),
)

# Flask route(..., methods=[...]) and Flask/FastAPI method shortcuts
_FLASK_ROUTE = re.compile(
    rf"@(?:app|bp|blueprint)\.route\(\s*{_QUOTED}.*?methods\s*=\s*\[\s*{_QUOTED}",
    re.IGNORECASE,
)
_FLASK_ROUTE_DEFAULT = re.compile(
    rf"@(?:app|bp|blueprint)\.route\(\s*{_QUOTED}\s*\)", re.IGNORECASE
)
_PY_METHOD_DECORATOR = re.compile(
    rf"@(?:app|router|api)\.({_HTTP_METHODS})\(\s*{_QUOTED}", re.IGNORECASE
)

# Free-text API descriptions: "GET /users", "POST /users/{id}"
_SPEC_ENDPOINT = re.compile(rf"\b({_HTTP_METHODS})\s+(/[^\s'\"`,;)]*)", re.IGNORECASE)

_JS_FUNCTION_PATTERNS = (
    re.compile(r"\bfunction\s*\*?\s*(\w+)\s*\("),
    re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:function\b|\([^)]*\)\s*=>|\w+\s*=>)"),
    re.compile(r"^\s*(\w+)\s*:\s*(?:async\s+)?function\b", re.MULTILINE),
)
_PY_FUNCTION = re.compile(r"^\s*(?:async\s+)?def\s+(\w+)\s*\(", re.MULTILINE)

_TEST_SUFFIXES = (
    ".test.js",
    ".spec.js",
    ".test.ts",
    ".spec.ts",
    "_test.py",
    "_test.go",
)


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_js_endpoints(code: str) -> list[str]:
    """Extract "METHOD /path" strings from JavaScript/TypeScript source.

    Recognises ``app.get('/x')``, ``router.post('/x')`` and NestJS
    ``@Get('/x')`` style decorators.

    Example:
        >>> extract_js_endpoints("app.get('/users', handler)")
        ['GET /users']
    """
    endpoints: list[str] = []
    for pattern in _JS_ENDPOINT_PATTERNS:
        for method, path in pattern.findall(code):
            endpoints.append(f"{method.upper()} {path}")
    return endpoints


def extract_python_endpoints(code: str) -> list[str]:
    """Extract "METHOD /path" strings from Flask or FastAPI source.

    A bare ``@app.route('/x')`` with no methods list is reported as GET,
    which is Flask's default.

    Example:
        >>> extract_python_endpoints("@app.route('/items', methods=['POST'])")
        ['POST /items']
    """
    endpoints: list[str] = []
    for path, method in _FLASK_ROUTE.findall(code):
        endpoints.append(f"{method.upper()} {path}")
    for path in _FLASK_ROUTE_DEFAULT.findall(code):
        endpoints.append(f"GET {path}")
    for method, path in _PY_METHOD_DECORATOR.findall(code):
        endpoints.append(f"{method.upper()} {path}")
    return endpoints


def extract_spec_endpoints(text: str) -> list[str]:
    """Extract endpoints from free-text API documentation.

    Example:
        >>> extract_spec_endpoints("Use GET /health and POST /orders for writes")
        ['GET /health', 'POST /orders']
    """
    return _unique([f"{m.upper()} {p}" for m, p in _SPEC_ENDPOINT.findall(text)])


def extract_endpoints(code: str, suffix: str) -> list[str]:
    """Dispatch to the endpoint extractor for a file extension."""
    if suffix in JS_EXTENSIONS:
        return extract_js_endpoints(code)
    if suffix in PYTHON_EXTENSIONS:
        return extract_python_endpoints(code)
    return []


def extract_js_functions(code: str) -> list[str]:
    """Extract declared function names from JavaScript/TypeScript source.

    Example:
        >>> extract_js_functions("function add(a, b) {}\\nconst sub = (a, b) => a - b;")
        ['add', 'sub']
    """
    names: list[str] = []
    for pattern in _JS_FUNCTION_PATTERNS:
        names.extend(pattern.findall(code))
    return _unique(names)


def extract_python_functions(code: str, include_private: bool = False) -> list[str]:
    """Extract function and method names from Python source.

    Dunder methods are always skipped; single-underscore names are skipped
    unless ``include_private`` is set.

    Example:
        >>> extract_python_functions("def add(a, b):\\n    return a + b\\ndef _helper(): pass")
        ['add']
    """
    names = []
    for name in _PY_FUNCTION.findall(code):
        if name.startswith("__") and name.endswith("__"):
            continue
        if name.startswith("_") and not include_private:
            continue
        names.append(name)
    return _unique(names)


def is_test_file(path: str | PurePath) -> bool:
    """Return True if a path looks like a test file.

    Any path segment containing "test" or "spec" qualifies, so files under
    a ``tests/`` directory count. Callers should pass project-relative paths.
    """
    name = str(path).lower()
    return "test" in name or "spec" in name or name.endswith(_TEST_SUFFIXES)


def is_source_file(path: str | PurePath) -> bool:
    """Return True for source files that are not tests."""
    return PurePath(path).suffix in SOURCE_EXTENSIONS and not is_test_file(path)
