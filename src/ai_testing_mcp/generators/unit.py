"""
Template-based unit test generation.

Produces test skeletons for the functions found in a source file: one test
group per function with valid-input, edge-case and error-handling cases.
The skeletons import from the real module name so they run once the
placeholders are filled in.
"""

from pathlib import PurePath

from ai_testing_mcp.analyzers.patterns import (
    JS_EXTENSIONS,
    PYTHON_EXTENSIONS,
    extract_js_functions,
    extract_python_functions,
)
from ai_testing_mcp.errors import ToolExecutionError

JS_FRAMEWORKS = ("jest", "mocha", "vitest")
PYTHON_FRAMEWORKS = ("pytest", "unittest")


def _class_name(func: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in func.split("_") if part)


def _js_cases(func: str, it: str, defined: str) -> list[str]:
    return [
        f"describe('{func}', () => {{",
        f"  {it}('should work correctly with valid input', () => {{",
        "    // TODO: Add test implementation",
        f"    {defined}",
        "  });",
        "",
        f"  {it}('should handle edge cases', () => {{",
        "    // TODO: Add edge case tests",
        "  });",
        "",
        f"  {it}('should handle invalid input', () => {{",
        "    // TODO: Add error handling tests",
        "  });",
        "});",
        "",
    ]


def generate_js_unit_tests(
    functions: list[str], module: str, framework: str = "jest"
) -> str:
    """Render JavaScript test skeletons for jest, mocha or vitest.

    Args:
        functions: Function names to cover.
        module: Module specifier relative to the test file (e.g. "./math").
        framework: One of ``JS_FRAMEWORKS``.

    Returns:
        Test file source.

    Raises:
        ToolExecutionError: If the framework is not a JavaScript framework.
    """
    names = ", ".join(functions)
    if framework == "jest":
        lines = [f"const {{ {names} }} = require('{module}');", ""]
        it, assertion = "test", "expect({func}).toBeDefined();"
    elif framework == "mocha":
        lines = [
            "const { expect } = require('chai');",
            f"const {{ {names} }} = require('{module}');",
            "",
        ]
        it, assertion = "it", "expect({func}).to.exist;"
    elif framework == "vitest":
        lines = [
            "import { describe, it, expect } from 'vitest';",
            f"import {{ {names} }} from '{module}';",
            "",
        ]
        it, assertion = "it", "expect({func}).toBeDefined();"
    else:
        raise ToolExecutionError(
            f"Unsupported JavaScript test framework: {framework} "
            f"(expected one of {', '.join(JS_FRAMEWORKS)})"
        )

    for func in functions:
        lines.extend(_js_cases(func, it, assertion.format(func=func)))
    return "\n".join(lines)


def generate_python_unit_tests(
    functions: list[str], module: str, framework: str = "pytest"
) -> str:
    """Render Python test skeletons for pytest or unittest.

    Args:
        functions: Function names to cover.
        module: Importable module name of the source file.
        framework: One of ``PYTHON_FRAMEWORKS``.

    Returns:
        Test file source.

    Raises:
        ToolExecutionError: If the framework is not a Python framework.
    """
    if framework not in PYTHON_FRAMEWORKS:
        raise ToolExecutionError(
            f"Unsupported Python test framework: {framework} "
            f"(expected one of {', '.join(PYTHON_FRAMEWORKS)})"
        )

    header = "import pytest" if framework == "pytest" else "import unittest"
    lines = [header, f"from {module} import {', '.join(functions)}", "", ""]
    base = "" if framework == "pytest" else "(unittest.TestCase)"
    check = "assert {func} is not None" if framework == "pytest" else "self.assertIsNotNone({func})"

    for func in functions:
        lines.extend(
            [
                f"class Test{_class_name(func)}{base}:",
                f"    def test_{func}_valid_input(self):",
                f'        """Test {func} with valid input"""',
                "        # TODO: Add test implementation",
                f"        {check.format(func=func)}",
                "",
                f"    def test_{func}_edge_cases(self):",
                f'        """Test {func} edge cases"""',
                "        # TODO: Add edge case tests",
                "        pass",
                "",
                f"    def test_{func}_error_handling(self):",
                f'        """Test {func} error handling"""',
                "        # TODO: Add error handling tests",
                "        pass",
                "",
                "",
            ]
        )

    if framework == "unittest":
        lines.extend(['if __name__ == "__main__":', "    unittest.main()", ""])
    return "\n".join(lines).rstrip("\n") + "\n"


def generate_unit_tests(
    source_code: str,
    file_path: str,
    function_name: str | None = None,
    test_framework: str | None = None,
) -> str:
    """Generate unit test skeletons for a source file.

    Selects the language from the file extension, extracts function names
    (or uses ``function_name`` alone when given) and renders the skeleton
    for the chosen framework. Defaults: jest for JavaScript/TypeScript,
    pytest for Python.

    Args:
        source_code: Contents of the file under test.
        file_path: Path of the file under test; drives language and import.
        function_name: Restrict generation to this one function.
        test_framework: Framework name; language default when None.

    Returns:
        Generated test source, or a comment explaining that no functions
        were found.

    Raises:
        ToolExecutionError: For unsupported file types or frameworks.

    Example:
        >>> print(generate_unit_tests("def add(a, b): ...", "calc.py").splitlines()[1])
        from calc import add
    """
    path = PurePath(file_path)
    suffix = path.suffix

    if suffix in JS_EXTENSIONS:
        functions = [function_name] if function_name else extract_js_functions(source_code)
        if not functions:
            return f"// No testable functions found in {file_path}\n"
        return generate_js_unit_tests(functions, f"./{path.stem}", test_framework or "jest")

    if suffix in PYTHON_EXTENSIONS:
        functions = [function_name] if function_name else extract_python_functions(source_code)
        if not functions:
            return f"# No testable functions found in {file_path}\n"
        return generate_python_unit_tests(functions, path.stem, test_framework or "pytest")

    raise ToolExecutionError(f"Unsupported file type: {suffix or path.name}")
